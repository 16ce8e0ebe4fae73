"""
Pipeline Entry Point

`run_search` is the single call a host (workflow node, HTTP route, command
line) makes: it takes an explicit `SearchContext` carrying the query, the
credentials and the options, and returns a `SearchResponse` or raises one
`SearchAIError`.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .config import PipelineConfig
from .core.errors import EmptyInputError
from .embeddings.embedder import Embedder
from .indexer import SearchResponse, SemanticIndexer
from .llm.client import LLMClient
from .search.browser import BrowserLauncher, default_launcher
from .search.fetcher import ContentFetcher
from .search.resolver import LinkResolver


class SearchContext(BaseModel):
    """
    Everything one search invocation needs.
    """

    query: str = Field(..., description="Natural-language question.")
    api_key: Optional[SecretStr] = Field(default=None, description="OpenAI API key.")
    k: Optional[int] = Field(default=None, description="Chunks ranked into the summary context.")
    config: PipelineConfig = Field(default_factory=PipelineConfig)

    model_config = ConfigDict(extra="forbid")


def build_indexer(
    api_key: Optional[SecretStr],
    config: Optional[PipelineConfig] = None,
    launcher: Optional[BrowserLauncher] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SemanticIndexer:
    """
    Wire a fresh `SemanticIndexer` with its own store, clients and fetcher.

    Raises
    ------
    ConfigurationError
        If `api_key` is missing.
    """
    config = config or PipelineConfig()
    launcher = launcher or default_launcher(config.fetch)

    embedder = Embedder(
        api_key,
        model=config.index.embedding_model,
        dimension=config.index.embedding_dimension,
        base_url=config.openai_base_url,
        timeout=config.http_timeout,
        batch_size=config.index.embedding_batch_size,
        max_concurrency=config.index.embedding_concurrency,
        transport=transport,
    )
    llm = LLMClient(
        api_key,
        model=config.index.completion_model,
        base_url=config.openai_base_url,
        timeout=config.http_timeout,
        transport=transport,
    )
    fetcher = ContentFetcher(
        config=config.fetch,
        resolver=LinkResolver(config.resolver, launcher=launcher),
        launcher=launcher,
    )
    return SemanticIndexer(embedder, llm, fetcher=fetcher, config=config.index)


async def run_search(
    context: SearchContext,
    indexer: Optional[SemanticIndexer] = None,
) -> SearchResponse:
    """
    Answer `context.query` from live web content.

    A fresh indexer is built from the context unless one is supplied (for
    example one pre-loaded through `SemanticIndexer.ingest`).
    """
    if not (context.query or "").strip():
        raise EmptyInputError("Query cannot be empty")
    if indexer is None:
        indexer = build_indexer(context.api_key, context.config)
    return await indexer.search(context.query, context.k)
