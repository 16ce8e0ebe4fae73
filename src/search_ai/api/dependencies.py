from ..config import settings
from ..indexer import SemanticIndexer
from ..pipeline import build_indexer


def get_indexer() -> SemanticIndexer:
    # A new indexer (and vector store) per request; stores are never shared
    # between concurrent searches.
    return build_indexer(settings.openai_api_key, settings.pipeline)
