"""API Routes."""
from deep_research.api.routes.tools import router as tools_router
from deep_research.api.routes.health import router as health_router

__all__ = ["tools_router", "health_router"]
