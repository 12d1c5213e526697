"""
Application Services Container

Centralized container for all application-level services.
Stored on app.state.services by the lifespan handler.
"""

import logging
from dataclasses import dataclass

from tosbur.api.services.websocket_manager import WebSocketManager
from tosbur.core.config import Settings
from tosbur.docker.client import DockerClient
from tosbur.notebook.launcher import NotebookLauncher
from tosbur.presentation.sessions import BrowserSessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """
    Container for all application-level services

    Provides centralized access to:
    - DockerClient (daemon calls)
    - NotebookLauncher (create/start/attach sequence)
    - BrowserSessionRegistry (embedded notebook panes)
    - WebSocketManager (event stream to the UI)
    """

    settings: Settings
    docker_client: DockerClient
    launcher: NotebookLauncher
    sessions: BrowserSessionRegistry
    websocket_manager: WebSocketManager

    @classmethod
    def create(cls, settings: Settings, docker_client: DockerClient | None = None) -> "AppServices":
        """
        Create new AppServices instance with all dependencies

        Args:
            settings: Application settings
            docker_client: Pre-built client (tests inject one over a mock transport)

        Returns:
            Initialized AppServices instance
        """
        logger.info("Initializing application services...")

        sessions = BrowserSessionRegistry()
        websocket_manager = WebSocketManager()
        sessions.subscribe(websocket_manager.broadcast_event)

        if docker_client is None:
            docker_client = DockerClient(
                socket_path=settings.docker_socket,
                api_version=settings.docker_api_version,
                timeout=settings.docker_timeout,
            )
        docker_client.listener = sessions

        launcher = NotebookLauncher(
            docker_client,
            attach_retries=settings.attach_retries,
            attach_retry_delay=settings.attach_retry_delay,
        )

        logger.info(
            f"Application services initialized (docker socket {settings.docker_socket}, "
            f"API {settings.docker_api_version})"
        )

        return cls(
            settings=settings,
            docker_client=docker_client,
            launcher=launcher,
            sessions=sessions,
            websocket_manager=websocket_manager,
        )

    async def cleanup(self) -> None:
        """Close connections on shutdown"""
        await self.websocket_manager.close_all()
        await self.docker_client.close()
        logger.info("Application services cleaned up")
