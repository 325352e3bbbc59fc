"""
Route Registration

Centralizes all route registration for the FastAPI application.

Route Hierarchy:
================
    /health, /ready, /live → Health check endpoints
    /kids                  → Kid profiles
    /devices               → Push token registration
    /requests/songs        → Song request lifecycle
    /requests/albums       → Album request lifecycle
    /library               → Approved songs and albums
    /moderation            → Cached AI reviews, lyrics, album overviews
    /discovery             → Cached AI search and recommendations

Usage:
======
    from safetunes.api.routes import register_routes

    app = FastAPI()
    register_routes(app)
"""

from fastapi import FastAPI

from safetunes.api.handlers import (
    discovery_handler,
    health_handler,
    library_handler,
    moderation_handler,
    profile_handler,
    request_handler,
)


def register_routes(app: FastAPI) -> None:
    """
    Register all API routes.

    Args:
        app: FastAPI application instance
    """
    # Health check endpoints (no prefix, root level)
    app.include_router(
        health_handler.router,
        tags=["Health"],
    )

    # Profiles & devices
    app.include_router(
        profile_handler.kids_router,
        prefix="/kids",
        tags=["Profiles"],
    )
    app.include_router(
        profile_handler.devices_router,
        prefix="/devices",
        tags=["Profiles"],
    )

    # Request lifecycle
    app.include_router(
        request_handler.song_router,
        prefix="/requests/songs",
        tags=["Song Requests"],
    )
    app.include_router(
        request_handler.album_router,
        prefix="/requests/albums",
        tags=["Album Requests"],
    )

    # Approved library
    app.include_router(
        library_handler.router,
        prefix="/library",
        tags=["Library"],
    )

    # Moderation
    app.include_router(
        moderation_handler.router,
        prefix="/moderation",
        tags=["Moderation"],
    )

    # Discovery
    app.include_router(
        discovery_handler.router,
        prefix="/discovery",
        tags=["Discovery"],
    )
