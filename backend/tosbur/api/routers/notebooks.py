"""
Notebooks API Router

Launches and stops notebook containers and exposes the browser panes the
UI should show for them.
"""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tosbur.api.dependencies import get_services
from tosbur.api.errors import ErrorCode, api_exception_handler, create_error_response
from tosbur.api.services import AppServices
from tosbur.docker.models import ContainerSpec

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notebooks", tags=["notebooks"])


# ============================================================================
# Pydantic Models
# ============================================================================


class LaunchRequest(BaseModel):
    """Request to launch a notebook container"""

    mount: str = Field(..., min_length=1, description="Host directory mounted at /home/jovyan/")
    image: str | None = Field(None, description="Image reference (default: from settings)")
    name: str | None = Field(None, description="Optional container name")


class LaunchResponse(BaseModel):
    """A launched notebook and the pane opened for it"""

    container_id: str
    image: str
    mount: str
    url: str
    started_at: str
    session_id: str | None = None


class BrowserSessionResponse(BaseModel):
    """An open notebook pane"""

    session_id: str
    container_id: str
    url: str
    opened_at: str


class BoundsResponse(BaseModel):
    """Pane bounds inside the host window"""

    x: int
    y: int
    width: int
    height: int


class StopResponse(BaseModel):
    success: bool
    container_id: str


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=list[BrowserSessionResponse])
async def list_sessions(services: AppServices = Depends(get_services)):
    """Open notebook panes"""
    return [session.to_dict() for session in services.sessions.list_sessions()]


@router.post("", response_model=LaunchResponse, status_code=201)
@api_exception_handler("launch_notebook")
async def launch_notebook(request: LaunchRequest, services: AppServices = Depends(get_services)):
    """
    Create, start and attach a notebook container.

    The pane is opened by the lifecycle notification; its id is returned
    here as well so the UI need not wait for the WebSocket event.
    """
    spec = ContainerSpec(
        image=request.image or services.settings.notebook_image,
        mount=request.mount,
        name=request.name,
        host_port=services.settings.notebook_host_port,
    )
    notebook = await services.launcher.launch(spec)
    pane = services.sessions.get(notebook.container_id)

    return LaunchResponse(
        **notebook.to_dict(),
        session_id=pane.session_id if pane else None,
    )


@router.delete("/{container_id}", response_model=StopResponse)
@api_exception_handler("stop_notebook")
async def stop_notebook(container_id: str, services: AppServices = Depends(get_services)):
    """Kill the notebook container; its pane is torn down"""
    await services.launcher.stop(container_id)
    return StopResponse(success=True, container_id=container_id)


@router.get("/{container_id}/bounds", response_model=BoundsResponse)
async def get_bounds(
    container_id: str,
    width: int = Query(..., ge=0),
    height: int = Query(..., ge=0),
    services: AppServices = Depends(get_services),
):
    """Where the UI should place the notebook pane in a window of the given size"""
    session = services.sessions.get(container_id)
    if session is None:
        raise create_error_response(
            ErrorCode.NOT_FOUND,
            f"No notebook pane open for container {container_id[:12]}",
            404,
            recovery_hint="Launch the notebook first.",
        )
    return session.bounds(width, height)
