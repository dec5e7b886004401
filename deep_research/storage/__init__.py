"""
Storage Package.

Provides the session store used by the research orchestrator.
"""

from deep_research.storage.base import SessionStore
from deep_research.storage.memory import EvictionPolicy, InMemorySessionStore

__all__ = [
    "SessionStore",
    "EvictionPolicy",
    "InMemorySessionStore",
]
