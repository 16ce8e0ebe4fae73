"""
Embedding Data Models

Records held by the in-memory vector store and the ranked results it returns.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class StoredChunk(NamedTuple):
    """One stored embedding: chunk position, vector, and the chunk text."""
    chunk_id: int
    vector: np.ndarray
    text: str


class SimilarityResult(BaseModel):
    """
    A stored chunk ranked against a query.

    `id` is the chunk's position within the ingest call that stored it and
    is not unique across ingest calls.
    """

    id: int = Field(..., ge=0, description="Chunk-local sequence position.")
    score: float = Field(..., ge=-1.0, le=1.0, description="Cosine similarity to the query.")
    text: str = Field(default="", description="The chunk text.")

    model_config = ConfigDict(extra="forbid", frozen=True)
