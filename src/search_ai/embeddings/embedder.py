"""
Embedding Client

Asynchronous client for the OpenAI embeddings API (or any compatible
provider). It is responsible for:

- Splitting inputs into request batches and sending them concurrently
- Network and transport error isolation
- Strict response validation, including the vector dimension
- Returning vectors in input order

The client holds no state between calls and is safe to reuse.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx
from pydantic import SecretStr

from ..core.errors import ConfigurationError, DimensionMismatchError, EmbeddingError

logger = logging.getLogger("searchai.embedder")


class Embedder:
    """
    Asynchronous embedding generator for batches of text.

    No caching is performed; every call goes to the API.
    """

    def __init__(
        self,
        api_key: Optional[SecretStr],
        model: str = "text-embedding-ada-002",
        dimension: int = 1536,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        batch_size: int = 20,
        max_concurrency: int = 4,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        api_key : Optional[SecretStr]
            OpenAI API key.

        model : str
            Embedding model name.

        dimension : int
            Required length of every returned vector.

        base_url : str
            API root; requests go to ``{base_url}/embeddings``.

        timeout : float
            HTTP timeout for each request.

        batch_size : int
            Maximum inputs per request.

        max_concurrency : int
            Maximum requests in flight at once.

        transport : Optional[httpx.AsyncBaseTransport]
            Transport override, used by tests.

        Raises
        ------
        ConfigurationError
            If no API key is supplied.
        """
        if api_key is None or not api_key.get_secret_value():
            raise ConfigurationError("An OpenAI API key is required for embeddings.")

        self._api_key = api_key
        self.model = model
        self.dimension = dimension
        self.url = base_url.rstrip("/") + "/embeddings"
        self.timeout = timeout
        self.batch_size = max(1, batch_size)
        self.max_concurrency = max(1, max_concurrency)
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Generate embeddings for a sequence of input texts.

        Parameters
        ----------
        texts : Sequence[str]
            Input strings.

        Returns
        -------
        List[List[float]]
            One vector per input, in input order.

        Raises
        ------
        EmbeddingError
            If any request fails or a response is malformed.

        DimensionMismatchError
            If any vector does not have `dimension` entries.
        """
        if not texts:
            return []

        batches = [
            list(texts[start : start + self.batch_size])
            for start in range(0, len(texts), self.batch_size)
        ]
        semaphore = asyncio.Semaphore(self.max_concurrency)
        headers = {"Authorization": f"Bearer {self._api_key.get_secret_value()}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            results = await asyncio.gather(
                *(self._embed_batch(client, headers, semaphore, batch) for batch in batches)
            )

        return [vector for batch_vectors in results for vector in batch_vectors]

    async def embed_one(self, text: str) -> List[float]:
        """Embed a single string."""
        vectors = await self.embed([text])
        return vectors[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _embed_batch(
        self,
        client: httpx.AsyncClient,
        headers: dict,
        semaphore: asyncio.Semaphore,
        batch: List[str],
    ) -> List[List[float]]:
        payload = {"model": self.model, "input": batch}

        async with semaphore:
            try:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error(
                    "Embedding request failed (%s): batch size=%d, error=%s",
                    type(exc).__name__,
                    len(batch),
                    str(exc),
                )
                raise EmbeddingError(
                    f"Embedding generation failed: {type(exc).__name__}"
                ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise EmbeddingError("Embedding response is not valid JSON.") from exc

        embeddings = self._extract_embeddings(data)
        if len(embeddings) != len(batch):
            raise EmbeddingError(
                f"Embedding count mismatch: sent {len(batch)}, received {len(embeddings)}"
            )

        for vector in embeddings:
            if len(vector) != self.dimension:
                raise DimensionMismatchError(
                    f"Unexpected embedding dimension: {len(vector)} (expected {self.dimension})"
                )

        return embeddings

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"index": 0, "embedding": [...]}, ... ] }

        Records are reordered by ``index`` when present.

        Raises
        ------
        EmbeddingError
            If the API returns unexpected structure.
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingError("'data' field must be a list.")

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}: {record!r}"
                )

        if all(isinstance(record.get("index"), int) for record in records):
            records = sorted(records, key=lambda record: record["index"])

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            emb = record["embedding"]
            if not isinstance(emb, list) or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingError(
                    f"Invalid embedding vector at index {index}: must be float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
