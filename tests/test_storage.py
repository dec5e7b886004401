"""Tests for the in-memory session store."""

import pytest
from prometheus_client import REGISTRY

from deep_research.core.session.models import ResearchSession
from deep_research.storage import EvictionPolicy, InMemorySessionStore
from deep_research.utils.exceptions import BusyError, SessionNotFoundError


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestInMemorySessionStore:
    """Tests for session storage and eviction."""

    @pytest.mark.asyncio
    async def test_put_and_get(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=None))
        session = ResearchSession(question="Tea?")

        await store.put(session)

        assert await store.get(session.id) is session
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_require_unknown(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=None))
        with pytest.raises(SessionNotFoundError) as exc:
            await store.require("missing")
        assert exc.value.message == "Research not found: missing"

        with pytest.raises(SessionNotFoundError):
            await store.require(None)

    @pytest.mark.asyncio
    async def test_delete(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=None))
        session = ResearchSession(question="Tea?")
        await store.put(session)

        assert await store.delete(session.id) is True
        assert await store.delete(session.id) is False
        assert await store.get(session.id) is None

    @pytest.mark.asyncio
    async def test_expired_sessions_disappear(self):
        clock = FakeClock()
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=60), clock=clock)
        session = ResearchSession(question="Tea?")
        await store.put(session)

        clock.now = 60
        assert await store.get(session.id) is session

        clock.now = 61
        assert await store.get(session.id) is None
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_update_does_not_refresh_expiry(self):
        clock = FakeClock()
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=60), clock=clock)
        session = ResearchSession(question="Tea?")
        await store.put(session)

        clock.now = 50
        await store.put(session)
        clock.now = 70
        assert await store.get(session.id) is None

    @pytest.mark.asyncio
    async def test_oldest_evicted_at_capacity(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=2, ttl=None))
        first, second, third = (ResearchSession(question=q) for q in ("a?", "b?", "c?"))

        for session in (first, second, third):
            await store.put(session)

        assert await store.get(first.id) is None
        assert await store.get(second.id) is second
        assert await store.get(third.id) is third

    @pytest.mark.asyncio
    async def test_busy_session_is_not_evicted(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=2, ttl=None))
        first, second, third = (ResearchSession(question=q) for q in ("a?", "b?", "c?"))
        await store.put(first)
        await store.put(second)

        async with store.writer(first.id):
            await store.put(third)

        assert await store.get(first.id) is first
        assert await store.get(second.id) is None
        assert await store.get(third.id) is third

    @pytest.mark.asyncio
    async def test_second_writer_is_rejected(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=None))
        session = ResearchSession(question="Tea?")
        await store.put(session)

        async with store.writer(session.id):
            with pytest.raises(BusyError):
                async with store.writer(session.id):
                    pass

        # released after the first writer exits
        async with store.writer(session.id):
            pass

    @pytest.mark.asyncio
    async def test_deleted_during_write_stays_deleted(self):
        """Test a write finishing after its session was deleted is discarded."""
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=None))
        session = ResearchSession(question="Tea?")
        await store.put(session)

        async with store.writer(session.id):
            assert await store.delete(session.id) is True
            await store.put(session)
            assert await store.get(session.id) is None

        assert await store.count() == 0
        assert session.id not in store._writer_locks


def _stored_gauge() -> float:
    return REGISTRY.get_sample_value("deep_research_sessions_stored")


class TestSessionsGauge:
    """Tests for the stored-sessions gauge."""

    @pytest.mark.asyncio
    async def test_tracks_capacity_eviction(self):
        store = InMemorySessionStore(EvictionPolicy(max_sessions=2, ttl=None))
        for question in ("a?", "b?", "c?"):
            await store.put(ResearchSession(question=question))

        assert _stored_gauge() == 2

    @pytest.mark.asyncio
    async def test_tracks_expiry_and_delete(self):
        clock = FakeClock()
        store = InMemorySessionStore(EvictionPolicy(max_sessions=10, ttl=60), clock=clock)
        first, second = ResearchSession(question="a?"), ResearchSession(question="b?")
        await store.put(first)
        await store.put(second)
        assert _stored_gauge() == 2

        await store.delete(first.id)
        assert _stored_gauge() == 1

        clock.now = 120
        await store.count()
        assert _stored_gauge() == 0
