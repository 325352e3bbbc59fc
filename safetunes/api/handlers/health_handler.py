"""
Health Check Handler

Probes for load balancers and Kubernetes. None require authentication.

    /health   process is up, reports name and version
    /ready    database reachable (503 otherwise)
    /live     process is up
"""

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from safetunes.api.dependencies import DbSession
from safetunes.config.settings import settings
from safetunes.shared.core.exceptions import ServiceUnavailableError
from safetunes.shared.schemas.common import HealthResponse


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        service=settings.APP_NAME.lower(),
        version=settings.APP_VERSION,
    )


@router.get("/ready")
async def readiness_check(db: DbSession):
    """Fails with 503 while the database is unreachable."""
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        raise ServiceUnavailableError("Database unavailable", details={"reason": str(e)}) from e
    return {"status": "ready"}


@router.get("/live")
async def liveness_check():
    return {"status": "alive"}
