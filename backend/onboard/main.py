"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onboard.config import get_settings
from onboard.infrastructure.database.session import engine, init_database
from onboard.infrastructure.dependencies import close_app_resources, open_app_resources
from onboard.infrastructure.logging.log_config import setup_logging
from onboard.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, connect shared clients, drain on shutdown."""
    settings = get_settings()
    setup_logging()

    # 1. Enable pgvector and create tables
    await init_database()

    # 2. Ensure upload directory exists
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    # 3. Shared HTTP client, Redis, headless browser, detached-task supervisor
    await open_app_resources(settings)
    logger.info("%s %s started (%s)", settings.app_title, settings.app_version, settings.app_env)

    yield

    # Shutdown: detached tasks get their grace period before clients close
    await close_app_resources(settings)
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "onboard.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
