"""
FastAPI Application.

HTTP entry point exposing the research tools.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deep_research.config import get_settings
from deep_research.core.research import ResearchOrchestrator, SearchInvoker
from deep_research.services.search import BraveSearchService, SearchService
from deep_research.storage import InMemorySessionStore, SessionStore
from deep_research.tools import ToolRegistry, build_registry
from deep_research.utils.exceptions import DeepResearchError
from deep_research.utils.logging import setup_logging, get_logger
from deep_research.utils.metrics import set_app_info
from deep_research.api.routes import tools_router, health_router


logger = get_logger(__name__)


@dataclass
class Services:
    """Wired collaborators shared by all requests."""
    search_service: SearchService
    store: SessionStore
    registry: ToolRegistry


def build_services(
    search_service: Optional[SearchService] = None,
    store: Optional[SessionStore] = None,
    api_key: Optional[str] = None,
) -> Services:
    """Wire the search provider, session store, orchestrator and tools."""
    search_service = search_service or BraveSearchService()
    store = store or InMemorySessionStore()
    invoker = SearchInvoker(search_service, api_key=api_key)
    orchestrator = ResearchOrchestrator(store, invoker)
    return Services(
        search_service=search_service,
        store=store,
        registry=build_registry(orchestrator, invoker),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    setup_logging(level=settings.logging.level)

    logger.info(f"Starting {settings.app_name} API v{settings.version} ({settings.environment})")
    if not settings.search.api_key:
        logger.warning(
            "No search API key configured; searches will fail. "
            "Set DEEP_RESEARCH_SEARCH_API_KEY or BRAVE_API_KEY."
        )
    set_app_info(version=settings.version, environment=settings.environment)

    yield

    logger.info(f"Shutting down {settings.app_name} API")
    await app.state.search_service.close()


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        services: Pre-wired services; built from settings when omitted
    """
    settings = get_settings()
    services = services or build_services()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Decomposes research questions, ranks web evidence and synthesizes cited reports.",
        version=settings.version,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.search_service = services.search_service
    app.state.store = services.store
    app.state.registry = services.registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(DeepResearchError)
    async def deep_research_error_handler(request: Request, exc: DeepResearchError):
        logger.error(f"DeepResearchError: {exc}")
        content = exc.to_dict(safe=settings.environment == "production")
        content["timestamp"] = datetime.now(timezone.utc).isoformat()
        return JSONResponse(status_code=500, content=content)

    app.include_router(tools_router, prefix="/api/v1")
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {
            "name": f"{settings.app_name} API",
            "version": settings.version,
            "environment": settings.environment,
            "tools": [tool["name"] for tool in services.registry.definitions()],
        }

    return app
