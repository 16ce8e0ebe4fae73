"""
Search Routes

Exposes the web search + summary pipeline over HTTP. Pipeline errors are
translated to status codes by the handlers registered in `main.create_app`.
"""

from fastapi import APIRouter, Depends, status
from typing import Annotated

from .models import SearchRequest
from .dependencies import get_indexer
from ..indexer import SearchResponse, SemanticIndexer

router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "/",
    response_model=SearchResponse,
    summary="Search the web and summarize the findings",
    status_code=status.HTTP_200_OK,
)
async def search(
    req: SearchRequest,
    indexer: Annotated[SemanticIndexer, Depends(get_indexer)],
) -> SearchResponse:
    """
    Resolve, fetch, index and summarize web content for a query.

    Parameters
    ----------
    req : SearchRequest
        Contains:
        - query: Question to research
        - k: Number of ranked chunks to ground the summary on

    Returns
    -------
    SearchResponse
        Summary, ranked chunks and phase timings.
    """
    return await indexer.search(req.query, req.k)
