"""
In-Memory Vector Store

A capacity-bounded, insertion-ordered store of chunk embeddings with exact
cosine-similarity ranking.

Key Properties
--------------
- Fixed dimension; vectors of any other shape are rejected
- FIFO eviction: inserting at capacity drops the oldest entry first
- Ranking scans every entry; zero-magnitude vectors score 0
- Lives for one indexer session only; nothing is persisted
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Sequence

import numpy as np

from ..core.errors import DimensionMismatchError
from .models import SimilarityResult, StoredChunk


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Return ``(a . b) / (|a| |b|)``, or 0.0 when either magnitude is zero.

    Raises
    ------
    DimensionMismatchError
        If the vectors differ in length.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise DimensionMismatchError(
            f"Invalid vector dimensions: {va.size}, {vb.size}"
        )

    magnitude = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if magnitude == 0.0:
        return 0.0

    score = float(np.dot(va, vb)) / magnitude
    return max(-1.0, min(1.0, score))


class VectorStore:
    """
    Ordered collection of `StoredChunk` entries with a hard capacity.

    Not safe for concurrent mutation; one store belongs to one indexer.
    """

    def __init__(self, dimension: int, capacity: int = 1000) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.dimension = dimension
        self.capacity = capacity
        self._entries: Deque[StoredChunk] = deque()

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> List[int]:
        return [entry.chunk_id for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def add(self, chunk_id: int, vector: Sequence[float], text: str = "") -> None:
        """
        Append an embedding, evicting the oldest entry first if full.
        """
        array = self._validated(vector)
        if len(self._entries) >= self.capacity:
            self._entries.popleft()
        self._entries.append(StoredChunk(chunk_id, array, text))

    def rank(self, query_vector: Sequence[float], k: int) -> List[SimilarityResult]:
        """
        Score every stored vector against the query and return the best
        ``min(k, len(self))`` results, highest score first.
        """
        query = self._validated(query_vector)
        if not self._entries or k <= 0:
            return []

        matrix = np.vstack([entry.vector for entry in self._entries])
        denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        scores = np.divide(
            dots,
            denominators,
            out=np.zeros_like(dots),
            where=denominators != 0,
        )
        scores = np.clip(scores, -1.0, 1.0)

        order = np.argsort(-scores, kind="stable")[: min(k, len(self._entries))]
        entries = list(self._entries)
        return [
            SimilarityResult(
                id=entries[i].chunk_id,
                score=float(scores[i]),
                text=entries[i].text,
            )
            for i in order
        ]

    def _validated(self, vector: Sequence[float]) -> np.ndarray:
        array = np.asarray(vector, dtype=np.float64)
        if array.ndim != 1 or array.shape[0] != self.dimension:
            raise DimensionMismatchError(
                f"Unexpected embedding dimension: {array.shape[-1] if array.ndim else 0} "
                f"(expected {self.dimension})"
            )
        return array
