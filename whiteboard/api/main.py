"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from whiteboard.api.config import get_settings
from whiteboard.api.middleware import LoggingMiddleware
from whiteboard.api.routes import api_router
from whiteboard.api.routes.boards import get_store

logger = logging.getLogger("whiteboard.api")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(
        f"Canvas {settings.canvas_width}x{settings.canvas_height}, "
        f"subject {settings.default_subject}, up to {settings.max_boards} boards"
    )

    yield

    # Boards are in-memory only
    logger.info(f"Shutting down, dropping {len(get_store().sessions())} board(s)")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description="Semantic whiteboard layout and command dispatch",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware, exclude_paths=[f"{settings.api_prefix}/health"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "whiteboard.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
