"""
FastAPI Main Application
Entry point for the crudsuite API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..db import Base
from .config import get_settings
from .dependencies import get_db_engine
from .errors import setup_error_handlers
from .middleware import RequestLoggingMiddleware, RequestTimingMiddleware
from .routers import (
    auth_router,
    community_router,
    discussion_board_router,
    health_router,
    shopping_router,
    todo_router,
)

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup when AUTO_CREATE_TABLES is set."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.version}...")

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=get_db_engine())
        logger.info(f"Database tables ready ({len(Base.metadata.tables)} tables)")

    yield

    logger.info(f"Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=settings.description,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    setup_error_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(discussion_board_router)
    app.include_router(community_router)
    app.include_router(shopping_router)
    app.include_router(todo_router)

    @app.get("/")
    async def root():
        """API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": settings.description,
            "products": {
                "discussion_board": "/discussionBoard",
                "community_platform": "/communityPlatform",
                "shopping_mall": "/shoppingMall",
                "todo": "/todo",
            },
            "endpoints": {
                "health": "/health",
                "metrics": "/metrics",
                "docs": "/docs",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "crudsuite.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
