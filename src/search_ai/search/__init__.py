"""
Web Retrieval Package

Provides link resolution against a search engine and concurrent page
fetching/extraction through a headless browser.
"""

from .resolver import LinkResolver
from .fetcher import ContentFetcher, FetchMetrics, FetchResult
from .extraction import ContentExtractor, SelectorStrategy, BodyStrategy

__all__ = [
    "LinkResolver",
    "ContentFetcher",
    "FetchMetrics",
    "FetchResult",
    "ContentExtractor",
    "SelectorStrategy",
    "BodyStrategy",
]
