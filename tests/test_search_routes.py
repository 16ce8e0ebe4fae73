"""
HTTP Surface Tests

The indexer dependency is overridden with a mock so no browser or API call is
made.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from search_ai.api.dependencies import get_indexer
from search_ai.core.errors import (
    ConfigurationError,
    EmptyInputError,
    NoResponseError,
    UpstreamError,
)
from search_ai.embeddings.models import SimilarityResult
from search_ai.indexer import SearchResponse, SemanticIndexer
from search_ai.main import create_app


@pytest.fixture
def mock_indexer():
    mock = AsyncMock(spec=SemanticIndexer)
    mock.search.return_value = SearchResponse(
        summary="Investigative summary.",
        results=[SimilarityResult(id=0, score=0.91, text="chunk text")],
    )
    return mock


@pytest.fixture
def client(mock_indexer):
    app = create_app()
    app.dependency_overrides[get_indexer] = lambda: mock_indexer
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health():
    response = TestClient(create_app()).get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["completion_model"] == "gpt-4o"


def test_search_success(client, mock_indexer):
    response = client.post("/search/", json={"query": "who won", "k": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == "Investigative summary."
    assert body["results"][0] == {"id": 0, "score": 0.91, "text": "chunk text"}
    assert "total_ms" in body["metrics"]
    mock_indexer.search.assert_awaited_once_with("who won", 3)


def test_search_validation(client, mock_indexer):
    assert client.post("/search/", json={"query": ""}).status_code == 422
    assert client.post("/search/", json={"query": "q", "k": 0}).status_code == 422
    assert client.post("/search/", json={"query": "q", "extra": 1}).status_code == 422
    mock_indexer.search.assert_not_called()


@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (EmptyInputError("Query cannot be empty"), 400, "invalid_input"),
        (UpstreamError("net::ERR_TIMED_OUT at https://internal"), 502, "upstream_failure"),
        (NoResponseError("empty"), 502, "no_response"),
    ],
)
def test_pipeline_errors_map_to_status(client, mock_indexer, error, status_code, code):
    mock_indexer.search.side_effect = error

    response = client.post("/search/", json={"query": "   "})

    assert response.status_code == status_code
    body = response.json()
    assert body["error"] == code
    if status_code >= 500:
        assert "internal" not in body["detail"]
    else:
        assert body["detail"] == str(error)


def test_missing_configuration_is_503():
    def unconfigured():
        raise ConfigurationError("An OpenAI API key is required for embeddings.")

    app = create_app()
    app.dependency_overrides[get_indexer] = unconfigured

    response = TestClient(app).post("/search/", json={"query": "anything"})

    assert response.status_code == 503
    assert response.json()["error"] == "not_configured"
