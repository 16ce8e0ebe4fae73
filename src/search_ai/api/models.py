"""
API Models

Request schema for the HTTP search surface. Responses reuse
`search_ai.indexer.SearchResponse` directly.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000, description="Question to research.")
    k: Optional[int] = Field(
        default=None,
        ge=1,
        le=50,
        description="Number of ranked chunks used as summary context.",
    )

    model_config = ConfigDict(extra="forbid")
