"""
Storage Base Interfaces.

Abstract base class for research session storage.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from deep_research.core.session.models import ResearchSession
from deep_research.utils.exceptions import SessionNotFoundError


class SessionStore(ABC):
    """
    Keyed holder of research sessions.

    Lookups and updates must be safe under concurrent callers. Writers to a
    single session are serialized through :meth:`writer`.
    """

    @abstractmethod
    async def get(self, research_id: str) -> ResearchSession | None:
        """
        Get a session by id.

        Returns:
            The session if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def put(self, session: ResearchSession) -> None:
        """
        Store a session, evicting others if the store is full.
        """
        pass

    @abstractmethod
    async def delete(self, research_id: str) -> bool:
        """
        Delete a session.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of live sessions."""
        pass

    @abstractmethod
    def writer(self, research_id: str) -> AbstractAsyncContextManager[None]:
        """
        Claim exclusive write access to one session.

        Raises:
            BusyError: If another writer already holds the session
        """
        pass

    async def require(self, research_id: str | None) -> ResearchSession:
        """Get a session or raise :class:`SessionNotFoundError`."""
        session = await self.get(research_id) if research_id else None
        if session is None:
            raise SessionNotFoundError(research_id)
        return session
