"""
Search invocation.

Bridges the research pipeline and the web-search provider: normalizes the
request, performs exactly one provider call and scores every hit.
"""

import time
from typing import Optional

from deep_research.config import get_settings
from deep_research.processing.scorer import calculate_relevance
from deep_research.services.search.base import SearchService
from deep_research.services.search.models import SearchResult
from deep_research.utils.exceptions import ConfigError, DeepResearchError, UpstreamError
from deep_research.utils.logging import get_logger
from deep_research.utils.metrics import SEARCH_LATENCY

logger = get_logger(__name__)


MAX_QUERY_LENGTH = 400
MIN_COUNT = 1
MAX_COUNT = 20
MAX_OFFSET = 9


class SearchInvoker:
    """
    Runs searches for the orchestrator and the web-search tool.

    Failures are never retried here. Configuration problems raise
    :class:`ConfigError`; anything raised by the provider surfaces as
    :class:`UpstreamError` carrying the original message.
    """

    def __init__(self, service: SearchService, api_key: Optional[str] = None):
        self.service = service
        self.api_key = api_key if api_key is not None else get_settings().search.api_key

    @staticmethod
    def normalize_query(query: str) -> str:
        return query[:MAX_QUERY_LENGTH]

    @staticmethod
    def clamp_count(count: int) -> int:
        return max(MIN_COUNT, min(count, MAX_COUNT))

    @staticmethod
    def clamp_offset(offset: int) -> int:
        return max(0, min(offset, MAX_OFFSET))

    async def search(self, query: str, count: int = 10, offset: int = 0) -> list[SearchResult]:
        """
        Search and score results.

        Args:
            query: Search text, truncated to 400 characters
            count: Requested results, clamped to [1, 20]
            offset: Pagination offset, clamped to [0, 9]

        Returns:
            Scored results in provider order
        """
        if not query:
            raise ConfigError("Search query is required")
        if not self.api_key:
            raise ConfigError(
                "Search API key is required",
                details="Set DEEP_RESEARCH_SEARCH_API_KEY or BRAVE_API_KEY",
            )

        query = self.normalize_query(query)
        count = self.clamp_count(count)
        offset = self.clamp_offset(offset)

        start = time.perf_counter()
        try:
            hits = await self.service.search(query, self.api_key, count=count, offset=offset)
        except DeepResearchError as e:
            SEARCH_LATENCY.labels(provider=self.service.name, outcome="error").observe(
                time.perf_counter() - start
            )
            logger.error(f"Search failed for '{query}': {e.message}")
            raise UpstreamError(e.message) from e
        except Exception as e:
            SEARCH_LATENCY.labels(provider=self.service.name, outcome="error").observe(
                time.perf_counter() - start
            )
            logger.error(f"Search failed for '{query}': {e}")
            raise UpstreamError(str(e)) from e

        SEARCH_LATENCY.labels(provider=self.service.name, outcome="ok").observe(
            time.perf_counter() - start
        )

        return [
            SearchResult(
                title=hit.title,
                description=hit.description,
                url=hit.url,
                relevance=calculate_relevance(query, hit.title, hit.description),
            )
            for hit in hits or []
        ]
