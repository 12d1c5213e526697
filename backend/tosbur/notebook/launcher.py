"""
Notebook launcher

Runs the create -> start -> attach sequence for a notebook container and
owns the retry policy for the attach step.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from tosbur.docker.client import DockerClient
from tosbur.docker.exceptions import DockerException, ParseError
from tosbur.docker.models import ContainerPhase, ContainerSpec

logger = logging.getLogger(__name__)


@dataclass
class NotebookSession:
    """
    A running notebook server

    Attributes:
        container_id: Daemon-assigned container id
        image: Image the container was created from
        mount: Host directory mounted into the container
        url: Notebook URL including its access token
        started_at: When the URL was obtained
    """

    container_id: str
    image: str
    mount: str
    url: str
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict"""
        return {
            "container_id": self.container_id,
            "image": self.image,
            "mount": self.mount,
            "url": self.url,
            "started_at": self.started_at.isoformat(),
        }


class NotebookLauncher:
    """
    Launches and stops notebook containers

    The notebook server prints its URL a moment after the container starts,
    so a ParseError from attach is retried up to attach_retries times.
    Other errors propagate immediately.
    """

    def __init__(
        self,
        client: DockerClient,
        attach_retries: int = 5,
        attach_retry_delay: float = 2.0,
    ):
        """
        Initialize launcher

        Args:
            client: Docker client used for every daemon call
            attach_retries: Extra attach attempts after a ParseError
            attach_retry_delay: Seconds between attach attempts
        """
        self.client = client
        self.attach_retries = attach_retries
        self.attach_retry_delay = attach_retry_delay
        self._sessions: dict[str, NotebookSession] = {}

    @property
    def sessions(self) -> list[NotebookSession]:
        return list(self._sessions.values())

    def get_session(self, container_id: str) -> NotebookSession | None:
        return self._sessions.get(container_id)

    async def launch(self, spec: ContainerSpec) -> NotebookSession:
        """
        Create, start and attach a notebook container

        Args:
            spec: Image and bind mount

        Returns:
            NotebookSession with the notebook URL

        If start or attach fails, the container is killed (if it started)
        or removed (if it never did) before the error is re-raised with the
        full container id in its context.

        Raises:
            ParseError: If no URL appeared after all attach attempts
            DockerException: Any other client failure
        """
        logger.info(f"Launching notebook from {spec.image} with {spec.mount} mounted")

        container_id = await self.client.create_container(spec)
        try:
            await self.client.start_container(container_id)
            url = await self.wait_for_url(container_id)
        except DockerException as e:
            e.context["container_id"] = container_id
            await self._discard(container_id)
            raise

        session = NotebookSession(
            container_id=container_id,
            image=spec.image,
            mount=spec.mount,
            url=url,
        )
        self._sessions[container_id] = session
        return session

    async def wait_for_url(self, container_id: str) -> str:
        """
        Attach until the notebook URL shows up

        Raises:
            ParseError: If every attempt came back without a URL
        """
        attempts = max(self.attach_retries, 0) + 1
        attempt = 1

        while True:
            try:
                return await self.client.attach_container(container_id)
            except ParseError:
                if attempt >= attempts:
                    logger.error(
                        f"No notebook URL from {container_id[:12]} after {attempts} attempts"
                    )
                    raise
                logger.info(
                    f"Notebook URL not printed yet ({attempt}/{attempts}), "
                    f"retrying in {self.attach_retry_delay}s"
                )
            try:
                await asyncio.sleep(self.attach_retry_delay)
            except asyncio.CancelledError:
                logger.info(f"Attach wait cancelled for {container_id[:12]}")
                raise
            attempt += 1

    async def stop(self, container_id: str) -> None:
        """
        Kill a notebook container; the client signals teardown

        Containers launched by another process are adopted from the
        daemon's state first. Short ids and names resolve to the full id.
        """
        handle = self.client.get_handle(container_id)
        if handle is None:
            handle = await self.client.adopt_container(container_id)
        await self.client.kill_container(handle.container_id)
        self._sessions.pop(handle.container_id, None)
        logger.info(f"Notebook {handle.short_id} stopped")

    async def _discard(self, container_id: str) -> None:
        """Best-effort cleanup of a container whose launch failed"""
        phase = self.client.phase_of(container_id)
        try:
            if phase in (ContainerPhase.STARTED, ContainerPhase.ATTACHED):
                await self.client.kill_container(container_id)
            elif phase == ContainerPhase.CREATED:
                await self.client.remove_container(container_id, force=True)
        except DockerException as e:
            logger.warning(f"Could not clean up container {container_id[:12]}: {e}")
        else:
            logger.info(f"Cleaned up container {container_id[:12]} after failed launch")
