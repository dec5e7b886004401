"""
Search service models.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchHit:
    """A raw result as returned by the search provider."""

    title: str
    url: str
    description: str


@dataclass(frozen=True)
class SearchResult:
    """A search result scored against the query that produced it."""

    title: str
    description: str
    url: str
    relevance: float = 0.0

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "relevance": self.relevance,
        }
