from fastapi import APIRouter
from ..config import settings

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    return {
        "status": "ok",
        "configured": settings.openai_api_key is not None,
        "embedding_model": settings.pipeline.index.embedding_model,
        "completion_model": settings.pipeline.index.completion_model,
    }
