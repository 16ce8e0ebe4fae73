from unittest.mock import AsyncMock

import pytest
from pydantic import SecretStr

from conftest import FakeBrowser, make_launcher
from search_ai.config import PipelineConfig
from search_ai.core.errors import ConfigurationError, EmptyInputError
from search_ai.indexer import SearchResponse, SemanticIndexer
from search_ai.pipeline import SearchContext, build_indexer, run_search


def test_build_indexer_requires_api_key():
    with pytest.raises(ConfigurationError):
        build_indexer(None)


def test_build_indexer_wires_configuration():
    config = PipelineConfig.model_validate(
        {"index": {"max_vectors": 10, "completion_model": "gpt-4o-mini"}, "fetch": {"batch_size": 4}}
    )
    launcher = make_launcher(FakeBrowser())

    indexer = build_indexer(SecretStr("sk-test"), config, launcher=launcher)

    assert indexer.store.capacity == 10
    assert indexer.store.dimension == 1536
    assert indexer.llm.model == "gpt-4o-mini"
    assert indexer.fetcher.config.batch_size == 4
    assert indexer.fetcher.resolver.config.result_selector == "a[jsname]"


def test_context_rejects_unknown_fields():
    with pytest.raises(ValueError):
        SearchContext(query="q", unexpected=True)


@pytest.mark.asyncio
async def test_run_search_rejects_empty_query_before_wiring():
    # No API key: a ConfigurationError here would mean wiring happened first.
    with pytest.raises(EmptyInputError):
        await run_search(SearchContext(query="  "))


@pytest.mark.asyncio
async def test_run_search_delegates_to_indexer():
    indexer = AsyncMock(spec=SemanticIndexer)
    indexer.search.return_value = SearchResponse(summary="done")

    response = await run_search(SearchContext(query="climate policy", k=3), indexer=indexer)

    assert response.summary == "done"
    indexer.search.assert_awaited_once_with("climate policy", 3)
