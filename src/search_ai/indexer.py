"""
Semantic Indexer

Chunks text, embeds the chunks into a bounded in-memory store, ranks them
against a query and asks a completion model for a summary grounded in the
top-ranked chunks.

Major Responsibilities
----------------------
1. `ingest(text)`: chunk, embed (concurrently), append to the store.
2. `answer(query, k)`: embed the query, rank stored chunks, generate.
3. `search(query, k)`: fetch web content for the query, ingest it, answer.

Identifier Scheme
-----------------
Chunk identifiers are positions within the ingest call that produced them.
A second ingest call re-uses 0, 1, 2, ... so identifiers repeat across
calls. Each entry also carries its text, so ranking and generation never
need to look a chunk up by identifier.

An instance and its store belong to one session; callers must not run
overlapping `ingest`/`search` calls on the same instance.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .config import IndexConfig
from .core.errors import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    EmptyInputError,
    InvalidInputError,
    NoResponseError,
    SearchAIError,
)
from .embeddings.chunking import split_text
from .embeddings.embedder import Embedder
from .embeddings.models import SimilarityResult
from .embeddings.store import VectorStore
from .llm.client import LLMClient
from .search.fetcher import ContentFetcher, FetchMetrics

logger = logging.getLogger("searchai.indexer")

SYSTEM_PROMPT = (
    "Act as a professional investigative journalist and provide a detailed "
    "explanation based on the provided context."
)


# ---------------------------------------------------------------------
# Result Models
# ---------------------------------------------------------------------

class SearchMetrics(BaseModel):
    """
    Elapsed milliseconds per pipeline phase plus fetch counters.
    """

    fetch_ms: float = 0.0
    ingest_ms: float = Field(default=0.0, description="Chunking and chunk embedding.")
    embed_ms: float = Field(default=0.0, description="Query embedding.")
    rank_ms: float = 0.0
    generate_ms: float = 0.0
    total_ms: float = 0.0

    content_length: int = 0
    chunk_count: int = 0
    stored_vectors: int = 0
    fetch: Optional[FetchMetrics] = None


class SearchResponse(BaseModel):
    summary: str
    results: List[SimilarityResult] = Field(default_factory=list)
    metrics: SearchMetrics = Field(default_factory=SearchMetrics)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


# ---------------------------------------------------------------------
# Indexer
# ---------------------------------------------------------------------

class SemanticIndexer:
    def __init__(
        self,
        embedder: Embedder,
        llm: LLMClient,
        fetcher: Optional[ContentFetcher] = None,
        config: Optional[IndexConfig] = None,
        store: Optional[VectorStore] = None,
    ) -> None:
        self.config = config or IndexConfig()
        self.embedder = embedder
        self.llm = llm
        self.fetcher = fetcher
        self.store = store or VectorStore(
            dimension=self.config.embedding_dimension,
            capacity=self.config.max_vectors,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split_text(self, text: str) -> List[str]:
        return split_text(text, self.config.chunk_size, self.config.chunk_overlap)

    async def ingest(self, text: str) -> int:
        """
        Chunk and embed `text` and append the chunks to the store.

        Returns
        -------
        int
            Number of chunks stored by this call (earlier entries may have
            been evicted to make room).

        Raises
        ------
        EmptyInputError
            If `text` is empty.
        EmbeddingError, DimensionMismatchError
            If embedding fails; nothing from this call is stored.
        """
        if not text or not text.strip():
            raise EmptyInputError("Content cannot be empty")

        chunks = self.split_text(text)
        vectors = await self.embedder.embed(chunks)
        if len(vectors) != len(chunks):
            raise EmbeddingError(
                f"Embedding count mismatch: {len(chunks)} chunks, {len(vectors)} vectors"
            )
        for vector in vectors:
            if len(vector) != self.store.dimension:
                raise DimensionMismatchError(
                    f"Unexpected embedding dimension: {len(vector)} (expected {self.store.dimension})"
                )

        for position, (chunk, vector) in enumerate(zip(chunks, vectors)):
            self.store.add(position, vector, chunk)

        logger.info(
            "Ingested %d chunks (%d characters); store holds %d vectors",
            len(chunks),
            len(text),
            len(self.store),
        )
        return len(chunks)

    async def rank(self, query: str, k: Optional[int] = None) -> List[SimilarityResult]:
        """Embed `query` and return the top `k` stored chunks."""
        query, k = self._validated(query, k)
        query_vector = await self.embedder.embed_one(query)
        return self.store.rank(query_vector, k)

    async def answer(self, query: str, k: Optional[int] = None) -> SearchResponse:
        """
        Rank already-ingested content against `query` and generate a summary.
        No web content is fetched.
        """
        query, k = self._validated(query, k)
        metrics = SearchMetrics()
        started = time.perf_counter()
        response = await self._answer(query, k, metrics)
        response.metrics.total_ms = _elapsed_ms(started)
        return response

    async def search(self, query: str, k: Optional[int] = None) -> SearchResponse:
        """
        Fetch web content for `query`, ingest it, rank, and summarize.

        Parameters
        ----------
        query : str
            Natural-language question; trimmed, must be non-empty.
        k : Optional[int]
            Number of chunks to rank into the context (default from config).

        Returns
        -------
        SearchResponse
            Summary text, the ranked chunks, and phase timings.

        Raises
        ------
        EmptyInputError
            For an empty query (before any I/O), or when no content could be
            fetched and nothing was ingested earlier.
        InvalidInputError
            If `k` is less than 1.
        ConfigurationError
            If the indexer was built without a fetcher.
        UpstreamError, DimensionMismatchError, NoResponseError
            From the fetch, embedding or completion steps.
        """
        query, k = self._validated(query, k)
        if self.fetcher is None:
            raise ConfigurationError("SemanticIndexer.search requires a ContentFetcher")

        metrics = SearchMetrics()
        started = time.perf_counter()

        try:
            logger.info("Fetching web content for query: %r", query)
            phase = time.perf_counter()
            fetched = await self.fetcher.fetch_for_query(query)
            metrics.fetch_ms = _elapsed_ms(phase)
            metrics.fetch = fetched.metrics
            metrics.content_length = len(fetched.text)
            logger.info(
                "Retrieved %d characters of content in %.0fms",
                len(fetched.text),
                metrics.fetch_ms,
            )

            if fetched.text:
                phase = time.perf_counter()
                metrics.chunk_count = await self.ingest(fetched.text)
                metrics.ingest_ms = _elapsed_ms(phase)
            elif len(self.store):
                logger.warning("No web content retrieved; answering from previously ingested content")
            else:
                raise EmptyInputError("No web content could be retrieved for the query")

            response = await self._answer(query, k, metrics)
        except SearchAIError as exc:
            logger.error("Search operation failed: %s", exc)
            raise

        response.metrics.total_ms = _elapsed_ms(started)
        return response

    def build_messages(self, query: str, results: List[SimilarityResult]) -> List[Dict[str, str]]:
        """Compose the user message carrying the question and ranked context."""
        context = "\n\n".join(
            f"Result {result.id}: Similarity {result.score:.4f}\n{result.text}"
            for result in results
        )
        return [{"role": "user", "content": f"Question: {query}\n\nContext: {context}"}]

    async def summarize(self, query: str, results: List[SimilarityResult]) -> str:
        """
        Ask the completion model for a summary grounded in `results`.

        Raises
        ------
        NoResponseError
            If the model returns no text.
        """
        message = await self.llm.chat(
            SYSTEM_PROMPT,
            self.build_messages(query, results),
            temperature=self.config.temperature,
        )
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise NoResponseError("No response generated from the completion model")
        return content

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _validated(self, query: str, k: Optional[int]) -> tuple:
        query = (query or "").strip()
        if not query:
            raise EmptyInputError("Query cannot be empty")
        k = self.config.default_k if k is None else k
        if k < 1:
            raise InvalidInputError("k must be at least 1")
        return query, k

    async def _answer(self, query: str, k: int, metrics: SearchMetrics) -> SearchResponse:
        phase = time.perf_counter()
        query_vector = await self.embedder.embed_one(query)
        metrics.embed_ms = _elapsed_ms(phase)

        phase = time.perf_counter()
        results = self.store.rank(query_vector, k)
        metrics.rank_ms = _elapsed_ms(phase)
        metrics.stored_vectors = len(self.store)

        logger.info("Requesting summary for %d ranked chunks", len(results))
        phase = time.perf_counter()
        summary = await self.summarize(query, results)
        metrics.generate_ms = _elapsed_ms(phase)

        return SearchResponse(summary=summary, results=results, metrics=metrics)
