"""Health check endpoints for readiness and liveness probes."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from mirotrak.services.database import get_database_manager

router = APIRouter(tags=["health"])

SERVICE_NAME = "mirotrak"
SERVICE_VERSION = "1.0.0"


async def _database_status() -> str:
    db_manager = get_database_manager()
    if db_manager is None:
        return "not_initialized"
    return "healthy" if await db_manager.health_check() else "unhealthy"


def _database_type() -> str:
    db_manager = get_database_manager()
    if db_manager is None:
        return "unknown"
    return "sqlite" if db_manager.sync_url.startswith("sqlite") else "postgresql"


@router.get(
    "/v1/readiness",
    summary="Readiness probe",
    description="Check if the service is ready to accept requests",
    status_code=status.HTTP_200_OK,
)
async def readiness() -> JSONResponse:
    """Readiness probe endpoint.

    Returns 200 if the database answers, 503 otherwise.

    Returns:
        JSONResponse with readiness status
    """
    checks = {"database": await _database_status()}

    if all(value == "healthy" for value in checks.values()):
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "checks": checks},
        )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "checks": checks},
    )


@router.get(
    "/v1/liveness",
    summary="Liveness probe",
    description="Check if the service is alive",
    status_code=status.HTTP_200_OK,
)
async def liveness() -> dict:
    """Liveness probe endpoint."""
    return {"status": "alive"}


@router.get(
    "/v1/health",
    summary="General health check",
    description="Health check with per-dependency status",
    status_code=status.HTTP_200_OK,
)
async def health() -> dict:
    """Health check endpoint.

    Returns:
        Detailed health status dict
    """
    checks = {
        "database": {
            "status": await _database_status(),
            "type": _database_type(),
        }
    }

    all_healthy = all(check["status"] == "healthy" for check in checks.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "version": SERVICE_VERSION,
        "service": SERVICE_NAME,
        "checks": checks,
    }
