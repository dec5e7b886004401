"""Utility modules."""
from .logging import get_logger, setup_logging, LogContext

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
]
