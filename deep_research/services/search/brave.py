"""
Brave Search service implementation.
"""

import time
from typing import Any, Optional

import httpx

from deep_research.config import get_settings
from deep_research.services.search.base import SearchService
from deep_research.services.search.models import SearchHit
from deep_research.utils.exceptions import (
    SearchError,
    SearchTimeoutError,
    SearchConnectionError,
)
from deep_research.utils.logging import get_logger

logger = get_logger(__name__)


class BraveSearchService(SearchService):
    """
    Brave Web Search API client.

    Sends one GET per search with the subscription token header and maps
    ``web.results`` entries into :class:`SearchHit` objects.
    """

    name = "brave"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.search.base_url
        self.timeout = timeout or settings.search.timeout
        self.max_results = settings.search.max_results
        self._verify_ssl = settings.search.verify_ssl

        self._client: Optional[httpx.AsyncClient] = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip",
                },
                verify=self._verify_ssl,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _parse_results(data: Any) -> list[SearchHit]:
        """Extract hits from a Brave payload; anything malformed yields no hits."""
        if not isinstance(data, dict):
            return []
        web = data.get("web")
        if not isinstance(web, dict):
            return []
        raw_results = web.get("results")
        if not isinstance(raw_results, list):
            return []

        hits = []
        for raw in raw_results:
            if not isinstance(raw, dict):
                continue
            hits.append(
                SearchHit(
                    title=raw.get("title") or "",
                    url=raw.get("url") or "",
                    description=raw.get("description") or "",
                )
            )
        return hits

    async def search(
        self,
        query: str,
        api_key: str,
        count: int = 10,
        offset: int = 0,
    ) -> list[SearchHit]:
        """
        Execute a search query against the Brave Web Search API.
        """
        start_time = time.time()
        params = {
            "q": query,
            "count": min(count, self.max_results),
        }
        if offset:
            params["offset"] = offset

        logger.debug(f"Searching Brave: '{query}' (count={params['count']}, offset={offset})")

        try:
            client = await self._get_client()
            response = await client.get(
                self.base_url,
                params=params,
                headers={"X-Subscription-Token": api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Brave search timeout for query: {query}")
            raise SearchTimeoutError(query, self.timeout) from e
        except httpx.ConnectError as e:
            logger.error(f"Cannot connect to Brave Search at {self.base_url}")
            raise SearchConnectionError("Brave Search", str(e)) from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Brave Search HTTP error: {e.response.status_code}")
            raise SearchError(
                f"Search failed with status {e.response.status_code}",
                code="SEARCH_HTTP_ERROR",
            ) from e
        except ValueError as e:
            logger.error(f"Brave Search returned a non-JSON body: {e}")
            raise SearchError(
                "Search provider returned an unreadable response",
                code="SEARCH_BAD_RESPONSE",
                details=str(e),
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Brave Search transport error: {e}")
            raise SearchError(str(e)) from e

        hits = self._parse_results(data)

        logger.info(
            f"Search complete: '{query}' -> {len(hits)} results in {time.time() - start_time:.2f}s"
        )
        return hits

    async def health_check(self) -> bool:
        """Check if the Brave API host answers."""
        try:
            client = await self._get_client()
            response = await client.get(self.base_url)
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.warning(f"Brave Search health check failed: {e}")
            return False
