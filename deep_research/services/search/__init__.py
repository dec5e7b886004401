"""Search Service - Brave web search integration."""
from .base import SearchService
from .brave import BraveSearchService
from .models import SearchHit, SearchResult

__all__ = [
    "SearchService",
    "BraveSearchService",
    "SearchHit",
    "SearchResult",
]
