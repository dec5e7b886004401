"""
Health Check Routes.

Provides health, liveness and metrics endpoints for monitoring.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from deep_research.config import get_settings
from deep_research.utils.logging import get_logger
from deep_research.utils.metrics import metrics_response


logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check(request: Request):
    """
    Health check including the search provider.
    """
    settings = get_settings()
    service = request.app.state.search_service

    start = time.time()
    search_ok = await service.health_check()
    latency = (time.time() - start) * 1000

    return {
        "status": "healthy" if search_ok else "degraded",
        "version": settings.version,
        "services": [
            {
                "name": service.name,
                "healthy": search_ok,
                "latency_ms": latency,
                "configured": bool(settings.search.api_key),
            }
        ],
        "sessions": await request.app.state.store.count(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/live")
async def liveness():
    """
    Liveness probe.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/metrics")
async def metrics():
    """
    Prometheus metrics endpoint.
    """
    return metrics_response()
