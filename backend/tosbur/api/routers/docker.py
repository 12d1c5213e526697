"""
Docker API Router

Read-only pass-through endpoints onto the daemon for the desktop UI.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from tosbur.api.dependencies import get_services
from tosbur.api.errors import api_exception_handler
from tosbur.api.services import AppServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/docker", tags=["docker"])


@router.get("/version")
@api_exception_handler("get_docker_version")
async def get_version(services: AppServices = Depends(get_services)) -> dict[str, Any]:
    """Docker daemon version information"""
    return await services.docker_client.get_version()


@router.get("/images")
@api_exception_handler("list_images")
async def list_images(
    show_all: bool = Query(default=True, alias="all"),
    services: AppServices = Depends(get_services),
) -> list[dict]:
    """Images known to the daemon"""
    return await services.docker_client.list_images(show_all=show_all)


@router.get("/images/{image_id:path}")
@api_exception_handler("inspect_image")
async def inspect_image(image_id: str, services: AppServices = Depends(get_services)) -> dict[str, Any]:
    """Inspect a single image (image ids may contain slashes, e.g. jupyter/base-notebook)"""
    return await services.docker_client.inspect_image(image_id)


@router.get("/containers")
@api_exception_handler("list_containers")
async def list_containers(
    show_all: bool = Query(default=False, alias="all"),
    services: AppServices = Depends(get_services),
) -> list[dict]:
    """Containers (running only unless all=true)"""
    return await services.docker_client.list_containers(show_all=show_all)


@router.get("/containers/{container_id}")
@api_exception_handler("inspect_container")
async def inspect_container(
    container_id: str, services: AppServices = Depends(get_services)
) -> dict[str, Any]:
    return await services.docker_client.inspect_container(container_id)


@router.get("/containers/{container_id}/top")
@api_exception_handler("list_processes")
async def list_processes(
    container_id: str, services: AppServices = Depends(get_services)
) -> dict[str, Any]:
    return await services.docker_client.list_processes(container_id)


@router.get("/containers/{container_id}/logs", response_class=PlainTextResponse)
@api_exception_handler("get_container_logs")
async def get_logs(
    container_id: str,
    stderr: bool = Query(default=False),
    tail: int | None = Query(default=None, ge=1),
    services: AppServices = Depends(get_services),
) -> str:
    return await services.docker_client.get_logs(container_id, stderr=stderr, tail=tail)


@router.get("/events")
@api_exception_handler("get_events")
async def get_events(
    since: int | None = Query(default=None, ge=0),
    until: int | None = Query(default=None, ge=0),
    services: AppServices = Depends(get_services),
) -> list[dict]:
    """Daemon events between two UNIX timestamps (until defaults to now)"""
    return await services.docker_client.get_events(since=since, until=until)
