"""
Health check endpoints

- GET /health - Overall health check (healthy/degraded)
- GET /health/live - Liveness probe (always 200 if running)
- GET /health/ready - Readiness probe (200 if the Docker daemon answers, 503 if not)
"""

from typing import Any

from fastapi import APIRouter, Depends, Response

from tosbur import __version__
from tosbur.api.dependencies import get_services
from tosbur.api.services import AppServices

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(services: AppServices = Depends(get_services)) -> dict[str, Any]:
    """
    Overall health check

    The API can serve requests without Docker, so an unreachable daemon
    reports "degraded" rather than failing.
    """
    docker_ok = await services.docker_client.ping()

    return {
        "status": "healthy" if docker_ok else "degraded",
        "version": __version__,
        "docker": {
            "reachable": docker_ok,
            "socket": services.settings.docker_socket,
            "api_version": services.settings.docker_api_version,
        },
        "warnings": None if docker_ok else ["Cannot connect to Docker. Is it running?"],
    }


@router.get("/live")
async def liveness_probe() -> dict[str, str]:
    """Always returns 200 if the application is running"""
    return {"status": "alive"}


@router.get("/ready")
async def readiness_probe(
    response: Response, services: AppServices = Depends(get_services)
) -> dict[str, Any]:
    """
    Readiness probe

    Returns:
        200: Docker daemon reachable, notebooks can be launched
        503: Docker daemon unreachable
    """
    docker_ok = await services.docker_client.ping()
    if not docker_ok:
        response.status_code = 503
    return {"ready": docker_ok}
