"""
Run the Deep Research API server.

Sessions live in process memory, so the server always runs a single worker.
"""

import uvicorn

from deep_research.config import get_settings


if __name__ == "__main__":
    settings = get_settings()

    print(f"Starting {settings.app_name} API on {settings.api.host}:{settings.api.port}")
    print("Press CTRL+C to stop")
    print("-" * 60)

    uvicorn.run(
        "deep_research.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=1,
        reload=False,
        log_level="debug" if settings.api.debug else "info",
    )
