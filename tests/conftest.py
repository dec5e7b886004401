"""Shared fixtures: an in-memory search provider and wired research services."""

import asyncio
from typing import Optional

import pytest

from deep_research.core.research import ResearchOrchestrator, SearchInvoker
from deep_research.services.search.base import SearchService
from deep_research.services.search.models import SearchHit
from deep_research.storage import EvictionPolicy, InMemorySessionStore
from deep_research.tools import build_registry


DEFAULT_HITS = [
    SearchHit(
        title="Solar energy explained",
        url="https://energy.example/solar",
        description="Solar panels convert sunlight into electricity. Output depends on weather!",
    ),
    SearchHit(
        title="Wind power basics",
        url="https://energy.example/wind",
        description="Wind turbines turn kinetic energy into electricity. They need steady wind.",
    ),
    SearchHit(
        title="Renewables overview",
        url="https://renewables.example/overview",
        description="An overview of renewable energy sources and how they compare.",
    ),
]


class FakeSearchService(SearchService):
    """Scripted search provider recording every call."""

    name = "fake"

    def __init__(
        self,
        responses: Optional[dict[str, list[SearchHit]]] = None,
        default: Optional[list[SearchHit]] = None,
        errors: Optional[list[Exception]] = None,
    ):
        self.responses = responses or {}
        self.default = DEFAULT_HITS if default is None else default
        self.errors = list(errors or [])
        self.calls: list[dict] = []
        self.gate: Optional[asyncio.Event] = None
        self.entered: Optional[asyncio.Event] = None

    async def search(self, query, api_key, count=10, offset=0):
        self.calls.append({"query": query, "api_key": api_key, "count": count, "offset": offset})
        if self.entered is not None:
            self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.errors:
            raise self.errors.pop(0)
        return list(self.responses.get(query, self.default))[:count]

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def search_service():
    return FakeSearchService()


@pytest.fixture
def store():
    return InMemorySessionStore(EvictionPolicy(max_sessions=100, ttl=None))


@pytest.fixture
def invoker(search_service):
    return SearchInvoker(search_service, api_key="test-key")


@pytest.fixture
def orchestrator(store, invoker):
    return ResearchOrchestrator(store, invoker)


@pytest.fixture
def registry(orchestrator, invoker):
    return build_registry(orchestrator, invoker, preview_length=500)
