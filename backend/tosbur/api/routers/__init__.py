"""
API routers

Modular FastAPI routers for different API domains.
"""

from tosbur.api.routers.docker import router as docker_router
from tosbur.api.routers.health import router as health_router
from tosbur.api.routers.logs import router as logs_router
from tosbur.api.routers.notebooks import router as notebooks_router
from tosbur.api.routers.websockets import router as websockets_router

__all__ = [
    "docker_router",
    "health_router",
    "logs_router",
    "notebooks_router",
    "websockets_router",
]
