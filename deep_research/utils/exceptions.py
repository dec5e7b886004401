"""
Custom exceptions for Deep Research.

All application-specific exceptions inherit from DeepResearchError.
"""

from typing import Optional


class DeepResearchError(Exception):
    """Base exception for all Deep Research errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details
        self.recoverable = recoverable

    def to_dict(self, safe: bool = False) -> dict:
        """Convert exception to dictionary for API responses.

        Args:
            safe: If True, omit internal details (use in production).
        """
        result = {
            "error": {
                "code": self.code,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }
        if not safe and self.details:
            result["error"]["details"] = self.details
        return result


# --- Search Errors ---

class SearchError(DeepResearchError):
    """Errors raised by the search provider or its transport."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        recoverable: bool = True,
    ):
        super().__init__(message, code=code, details=details, recoverable=recoverable)


class SearchTimeoutError(SearchError):
    """Search request timed out."""

    def __init__(self, query: str, timeout: float):
        super().__init__(
            message=f"Search timed out after {timeout}s",
            code="SEARCH_TIMEOUT",
            details=f"Query: {query}",
        )


class SearchConnectionError(SearchError):
    """Cannot connect to search provider."""

    def __init__(self, provider: str, details: Optional[str] = None):
        super().__init__(
            message=f"Cannot connect to search provider: {provider}",
            code="SEARCH_CONNECTION_ERROR",
            details=details,
        )


class UpstreamError(SearchError):
    """A search failure surfaced to the caller, wrapping the original message."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Failed to perform search: {reason}",
            code="UPSTREAM_ERROR",
        )
        self.reason = reason


# --- Session Errors ---

class SessionError(DeepResearchError):
    """Errors related to research session management."""
    pass


class SessionNotFoundError(SessionError):
    """Research session not found."""

    def __init__(self, research_id: Optional[str]):
        super().__init__(
            message=f"Research not found: {research_id}",
            code="SESSION_NOT_FOUND",
            recoverable=False,
        )


class BusyError(SessionError):
    """Another writer is already advancing this session."""

    def __init__(self, research_id: str):
        super().__init__(
            message=f"Research is busy: {research_id}",
            code="SESSION_BUSY",
            details="Another continue call is in flight for this research",
            recoverable=True,
        )


class StateError(SessionError):
    """Operation is not allowed in the session's current state."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(
            message=message,
            code="STATE_ERROR",
            details=details,
            recoverable=False,
        )


# --- Config Errors ---

class ConfigError(DeepResearchError):
    """Errors related to configuration."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(
            message=message,
            code="CONFIG_ERROR",
            details=details,
            recoverable=False,
        )


# --- Validation Errors ---

class ValidationError(DeepResearchError):
    """Input validation errors."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=f"Field: {field}",
            recoverable=False,
        )
        self.field = field

