"""
SafeTunes API Application Entry Point

FastAPI application setup with all routers, middleware, and lifecycle management.

Application Architecture:
=========================
┌─────────────────────────────────────────────────────────────────────────────┐
│                           SAFETUNES API                                     │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│   ┌─────────────────────────────────────────────────────────────┐           │
│   │                    Middleware Stack                         │           │
│   │      CORS Middleware  ·  Error Handler                      │           │
│   └─────────────────────────────────────────────────────────────┘           │
│                              │                                              │
│                              ▼                                              │
│   ┌─────────────────────────────────────────────────────────────┐           │
│   │                       Routers                               │           │
│   │  Health · Kids · Devices · Requests · Library ·             │           │
│   │  Moderation · Discovery                                     │           │
│   └─────────────────────────────────────────────────────────────┘           │
│                              │                                              │
│                              ▼                                              │
│   ┌─────────────────────────────────────────────────────────────┐           │
│   │                Dependencies (Injected)                      │           │
│   │  Database · Auth (owner id) · Services · Dispatcher         │           │
│   └─────────────────────────────────────────────────────────────┘           │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘

Lifecycle:
==========
1. Application starts → lifespan startup
2. Database connection verified
3. Application serves requests
4. Application stops → lifespan shutdown
5. Outbound HTTP clients and database connections closed

Usage:
======
    # Run with uvicorn
    uvicorn safetunes.api.main:app --host 0.0.0.0 --port 8000 --reload

    # Or programmatically
    from safetunes.api.main import create_application
    app = create_application()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from safetunes.config.settings import settings
from safetunes.shared.adapters.lyrics_adapter import get_lyrics_adapter
from safetunes.shared.db import init_db, close_db
from safetunes.shared.core.logging import logger
from safetunes.api.middleware import setup_exception_handlers
from safetunes.api.routes import register_routes


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
    - Verify database connectivity

    Shutdown:
    - Close the lyric provider's HTTP client
    - Close database connections
    """
    # ═══════════════════════════════════════════════════════════════════════════
    # STARTUP
    # ═══════════════════════════════════════════════════════════════════════════
    logger.info(
        "Starting SafeTunes API",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.APP_ENV,
    )

    await init_db()

    logger.info("SafeTunes API started successfully")

    yield

    # ═══════════════════════════════════════════════════════════════════════════
    # SHUTDOWN
    # ═══════════════════════════════════════════════════════════════════════════
    logger.info("Shutting down SafeTunes API")

    await get_lyrics_adapter().close()
    await close_db()

    logger.info("SafeTunes API shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description="Parental approval and AI content moderation for kids' music",
        version=settings.APP_VERSION,
        # Only show docs in development
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # MIDDLEWARE
    # ═══════════════════════════════════════════════════════════════════════════

    # CORS Middleware - Must be added first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # EXCEPTION HANDLERS
    # ═══════════════════════════════════════════════════════════════════════════

    setup_exception_handlers(app)

    # ═══════════════════════════════════════════════════════════════════════════
    # ROUTES
    # ═══════════════════════════════════════════════════════════════════════════

    register_routes(app)

    return app


# Create the application instance
app = create_application()
