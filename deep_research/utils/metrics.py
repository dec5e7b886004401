"""
Prometheus metrics for Deep Research.

Exposes tool-call counters, search latency, and session gauges that can
be scraped at ``/health/metrics``.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)
from starlette.responses import Response


TOOL_CALLS = Counter(
    "deep_research_tool_calls_total",
    "Tool invocations by outcome",
    ["tool", "action", "status"],
)

SEARCH_LATENCY = Histogram(
    "deep_research_search_duration_seconds",
    "Latency of upstream search calls in seconds",
    ["provider", "outcome"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0),
)

SUB_QUESTIONS_PROCESSED = Counter(
    "deep_research_sub_questions_total",
    "Sub-questions advanced by outcome",
    ["outcome"],
)

SESSIONS_STORED = Gauge(
    "deep_research_sessions_stored",
    "Research sessions currently held in the session store",
)

APP_INFO = Info(
    "deep_research",
    "Deep Research application information",
)


def set_app_info(version: str, environment: str) -> None:
    """Set application info metric (call once at startup)."""
    APP_INFO.info({"version": version, "environment": environment})


def metrics_response() -> Response:
    """Generate a Prometheus-format ``/metrics`` response."""
    body = generate_latest(REGISTRY)
    return Response(content=body, media_type=CONTENT_TYPE_LATEST)
