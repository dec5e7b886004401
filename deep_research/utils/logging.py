"""
Logging utilities for Deep Research.

Provides structured logging with consistent formatting across all modules.
Supports both human-readable and JSON-structured output.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from deep_research.config import get_settings


# Extra record attributes copied into JSON output when present
CONTEXT_FIELDS = ("research_id", "action", "tool", "query")


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter.

    Each log record is emitted as a single-line JSON object with fields:
    ``timestamp``, ``level``, ``logger``, ``message``, plus optional
    ``exception`` and any context attached via :class:`LogContext`.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for attr in CONTEXT_FIELDS:
            val = getattr(record, attr, None)
            if val is not None:
                log_entry[attr] = val

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_string: Log format string. Defaults to config value.
        log_file: Optional file to write logs to. Defaults to config value.
    """
    settings = get_settings()

    level = level or settings.logging.level
    format_string = format_string or settings.logging.format
    log_file = log_file or settings.logging.file

    if settings.logging.json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(format_string)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )

    # Quiet noisy third-party loggers
    for logger_name in ["httpx", "httpcore", "asyncio"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name, typically __name__ of the module.
    """
    return logging.getLogger(name)


# Per-task context; each asyncio task sees its own copy
_log_context: ContextVar[dict] = ContextVar("deep_research_log_context", default={})


def _install_context_factory() -> None:
    """Wrap the record factory once so records pick up the current context."""
    base_factory = logging.getLogRecordFactory()
    if getattr(base_factory, "_deep_research_context", False):
        return

    def record_factory(*args, **kwargs):
        record = base_factory(*args, **kwargs)
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return record

    record_factory._deep_research_context = True
    logging.setLogRecordFactory(record_factory)


_install_context_factory()


class LogContext:
    """
    Context manager for adding extra context to log messages.

    The context lives in a ``ContextVar``, so it may be held across
    ``await`` and concurrent tasks never see each other's fields.

    Usage:
        with LogContext(logger, research_id="abc123", action="continue"):
            logger.info("Advancing research")
    """

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = context
        self._token: Optional[Token] = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, *args):
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None
