"""
In-memory session storage.

Process-lifetime store with a bounded eviction policy and per-session
writer locks.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from deep_research.core.session.models import ResearchSession
from deep_research.storage.base import SessionStore
from deep_research.utils.exceptions import BusyError
from deep_research.utils.logging import get_logger
from deep_research.utils.metrics import SESSIONS_STORED


logger = get_logger(__name__)


@dataclass(frozen=True)
class EvictionPolicy:
    """Bounds on how many sessions are kept and for how long."""

    max_sessions: int = 1000
    ttl: Optional[float] = 86400.0  # seconds; None keeps sessions forever

    @classmethod
    def from_settings(cls) -> "EvictionPolicy":
        from deep_research.config import get_settings
        session = get_settings().session
        return cls(max_sessions=session.max_sessions, ttl=session.ttl or None)


@dataclass
class _Entry:
    session: ResearchSession
    stored_at: float


class InMemorySessionStore(SessionStore):
    """
    Dict-backed session store.

    Expired sessions are dropped lazily on access and on insert. When the
    store is full the oldest session without an active writer is evicted.
    """

    def __init__(
        self,
        policy: Optional[EvictionPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.policy = policy or EvictionPolicy.from_settings()
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._writer_locks: dict[str, asyncio.Lock] = {}
        # ids removed while a writer held them; late writes are discarded
        self._dropped_in_flight: set[str] = set()
        self._lock = asyncio.Lock()

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return self.policy.ttl is not None and now - entry.stored_at > self.policy.ttl

    def _is_writing(self, research_id: str) -> bool:
        lock = self._writer_locks.get(research_id)
        return lock is not None and lock.locked()

    def _drop(self, research_id: str, reason: str) -> None:
        self._entries.pop(research_id, None)
        if self._is_writing(research_id):
            self._dropped_in_flight.add(research_id)
        else:
            self._writer_locks.pop(research_id, None)
        SESSIONS_STORED.set(len(self._entries))
        logger.info(f"Evicted research {research_id} ({reason})")

    def _sweep_expired(self, now: float) -> None:
        expired = [
            rid for rid, entry in self._entries.items()
            if self._is_expired(entry, now) and not self._is_writing(rid)
        ]
        for rid in expired:
            self._drop(rid, "expired")

    def _make_room(self) -> None:
        while len(self._entries) >= self.policy.max_sessions:
            # dicts keep insertion order, so the first idle entry is the oldest
            victim = next(
                (rid for rid in self._entries if not self._is_writing(rid)),
                None,
            )
            if victim is None:
                logger.warning(
                    f"Session store over capacity ({len(self._entries)}) "
                    "with every session busy"
                )
                return
            self._drop(victim, "capacity")

    async def get(self, research_id: str) -> ResearchSession | None:
        async with self._lock:
            entry = self._entries.get(research_id)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()) and not self._is_writing(research_id):
                self._drop(research_id, "expired")
                return None
            return entry.session

    async def put(self, session: ResearchSession) -> None:
        async with self._lock:
            if session.id in self._dropped_in_flight:
                logger.debug(f"Discarding write to removed research {session.id}")
                return
            if session.id not in self._entries:
                self._sweep_expired(self._clock())
                self._make_room()
                self._entries[session.id] = _Entry(session=session, stored_at=self._clock())
                SESSIONS_STORED.set(len(self._entries))
            else:
                self._entries[session.id].session = session

    async def delete(self, research_id: str) -> bool:
        async with self._lock:
            if research_id not in self._entries:
                return False
            self._drop(research_id, "deleted")
            return True

    async def count(self) -> int:
        async with self._lock:
            self._sweep_expired(self._clock())
            return len(self._entries)

    @asynccontextmanager
    async def writer(self, research_id: str) -> AsyncIterator[None]:
        lock = self._writer_locks.setdefault(research_id, asyncio.Lock())
        if lock.locked():
            raise BusyError(research_id)
        try:
            async with lock:
                yield
        finally:
            if research_id not in self._entries:
                self._writer_locks.pop(research_id, None)
                self._dropped_in_flight.discard(research_id)
