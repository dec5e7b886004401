"""
Abstract base class for search services.
"""

from abc import ABC, abstractmethod

from deep_research.services.search.models import SearchHit


class SearchService(ABC):
    """
    Abstract interface for keyword web-search providers.

    Implementations perform exactly one upstream request per call and
    never retry internally.
    """

    name: str = "search"

    @abstractmethod
    async def search(
        self,
        query: str,
        api_key: str,
        count: int = 10,
        offset: int = 0,
    ) -> list[SearchHit]:
        """
        Execute a search query.

        Args:
            query: Search query string
            api_key: Provider credential
            count: Maximum number of results (provider limit is 20)
            offset: Pagination offset

        Returns:
            Ordered hits; empty when the provider payload carries none

        Raises:
            SearchError: If the request fails
            SearchTimeoutError: If the request times out
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the search service is reachable.

        Returns:
            True if service is healthy
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None
