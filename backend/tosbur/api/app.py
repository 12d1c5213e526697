"""
FastAPI application - Main API server

Local API the desktop shell talks to: Docker queries, notebook launch/stop,
and the lifecycle event WebSocket.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tosbur import __version__
from tosbur.api.routers import (
    docker_router,
    health_router,
    logs_router,
    notebooks_router,
    websockets_router,
)
from tosbur.api.services import AppServices, setup_log_capture
from tosbur.core.config import Settings, get_settings
from tosbur.docker.client import DockerClient
from tosbur.docker.exceptions import DockerConnectionError, DockerException

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    docker_client: DockerClient | None = None,
) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Application settings (default: get_settings())
        docker_client: Pre-built Docker client (tests inject one over a mock transport)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info(f"Tosbur backend {__version__} - Startup")
        logger.info("=" * 60)

        services = AppServices.create(settings, docker_client=docker_client)
        app.state.services = services

        # Docker may start after us; report it but keep serving
        try:
            version = await services.docker_client.get_version()
            logger.info(f"[OK] Docker {version.get('Version', 'unknown')} (API {version.get('ApiVersion', '?')})")
        except DockerConnectionError as e:
            logger.warning(f"[WARN] {e}")
        except DockerException as e:
            logger.warning(f"[WARN] Could not get Docker version: {e}")

        yield

        logger.info("Shutting down...")
        await services.cleanup()

    app = FastAPI(
        title="Tosbur API",
        description="Run Jupyter notebooks in Docker containers from the desktop",
        version=__version__,
        lifespan=lifespan,
    )

    # Register health check router FIRST (before other routes)
    app.include_router(health_router)
    app.include_router(docker_router)
    app.include_router(notebooks_router)
    app.include_router(logs_router)
    app.include_router(websockets_router)

    # Backend binds to localhost only; the Electron renderer loads from file:// or a dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_log_capture(max_entries=settings.log_capture_entries)

    return app
