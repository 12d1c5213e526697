"""
Async Docker Engine REST API client
"""

import json
import logging
import time
from typing import Any

import httpx

from tosbur.core.interfaces import LifecycleListener
from tosbur.docker.endpoints import DockerEndpoints
from tosbur.docker.exceptions import (
    DaemonError,
    DaemonNotRunningError,
    DockerConnectionError,
    DockerException,
    LifecycleError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from tosbur.docker.models import (
    TRANSITIONS,
    ContainerHandle,
    ContainerPhase,
    ContainerSpec,
)
from tosbur.docker.stream import decode_output, find_notebook_url

logger = logging.getLogger(__name__)

# Kept on errors for diagnostics
MAX_ERROR_BODY = 2000


def _is_refused(exc: BaseException) -> bool:
    """True if the exception chain bottoms out in a refused or missing socket"""
    seen = 0
    current: BaseException | None = exc
    while current is not None and seen < 10:
        if isinstance(current, (ConnectionRefusedError, FileNotFoundError)):
            return True
        current = current.__cause__ or current.__context__
        seen += 1
    text = str(exc).lower()
    return "connection refused" in text or "no such file" in text


def _error_message(response: httpx.Response) -> str:
    """Daemon error bodies are {"message": "..."}; fall back to raw text"""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text.strip()


class DockerClient:
    """
    Async client for the Docker Engine REST API over a UNIX socket

    Tracks a ContainerHandle for every container it creates and refuses
    out-of-order lifecycle calls before any request is sent. Callers must
    serialise operations on the same container.

    Example:
        async with DockerClient("/var/run/docker.sock") as client:
            container_id = await client.create_container(spec)
            await client.start_container(container_id)
            url = await client.attach_container(container_id)
    """

    def __init__(
        self,
        socket_path: str = "/var/run/docker.sock",
        api_version: str = "v1.41",
        timeout: float = 30.0,
        listener: LifecycleListener | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Docker client

        Args:
            socket_path: Path of the daemon's UNIX socket
            api_version: API version path segment (e.g., "v1.41")
            timeout: Request timeout in seconds
            listener: Receives ready/teardown notifications
            transport: Override the socket transport (used by tests)
        """
        self.socket_path = socket_path
        self.api_version = api_version.strip("/")
        self.base_url = f"http://docker/{self.api_version}"
        self.timeout = timeout
        self.listener = listener

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(uds=socket_path),
        )

        self._handles: dict[str, ContainerHandle] = {}

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def close(self) -> None:
        """Close HTTP client connection"""
        await self.client.aclose()

    # Transport boundary

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        expected: tuple[int, ...] = (200,),
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Send one request and normalize every failure into the client's taxonomy

        Raises:
            DaemonNotRunningError: Socket refused or missing
            DockerConnectionError: Timeout or other transport failure
            NotFoundError: 404
            ValidationError: Other 4xx on a request carrying a body we built
            DaemonError: Any other unexpected status
        """
        context = context or {}
        try:
            response = await self.client.request(method, endpoint, params=params, json=json_body)
        except httpx.TimeoutException as e:
            logger.error(f"Docker request timed out: {method} {endpoint}")
            raise DockerConnectionError(
                f"Docker request timed out after {self.timeout}s",
                context={"endpoint": endpoint, **context},
            ) from e
        except httpx.ConnectError as e:
            if _is_refused(e):
                logger.warning("Cannot connect to Docker. Is it running?")
                raise DaemonNotRunningError(
                    f"Docker daemon is not running at {self.socket_path}",
                    context={"socket": self.socket_path},
                ) from e
            logger.error(f"Docker connection failed: {e}")
            raise DockerConnectionError(
                f"Unable to connect to Docker at {self.socket_path}: {e}",
                context={"socket": self.socket_path},
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Docker transport error on {method} {endpoint}: {e}")
            raise DockerConnectionError(
                f"Docker transport error: {e}",
                context={"endpoint": endpoint, **context},
            ) from e

        if response.status_code in expected:
            return response

        status = response.status_code
        message = _error_message(response)
        body = response.text[:MAX_ERROR_BODY]
        logger.error(f"API error {status} {message} {response.url}")

        if status == 404:
            raise NotFoundError(message, context=context, status_code=status, body=body)
        if 400 <= status < 500 and json_body is not None:
            raise ValidationError(message, context=context, status_code=status, body=body)
        raise DaemonError(message, context=context, status_code=status, body=body)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DaemonError(
                "Malformed JSON in daemon response",
                status_code=response.status_code,
                body=response.text[:MAX_ERROR_BODY],
            ) from e

    # Lifecycle bookkeeping

    def get_handle(self, container_id: str) -> ContainerHandle | None:
        """
        Handle for a tracked container, if any

        Handles are keyed by the daemon's full id; a unique id prefix
        (such as the 12-character short id) resolves to the same handle.
        """
        handle = self._handles.get(container_id)
        if handle is not None or not container_id:
            return handle
        matches = [h for key, h in self._handles.items() if key.startswith(container_id)]
        return matches[0] if len(matches) == 1 else None

    @property
    def handles(self) -> list[ContainerHandle]:
        return list(self._handles.values())

    def phase_of(self, container_id: str) -> ContainerPhase:
        handle = self.get_handle(container_id)
        return handle.phase if handle else ContainerPhase.ABSENT

    def _require(self, container_id: str, operation: str) -> ContainerHandle:
        """Reject an out-of-order transition before any request is issued"""
        allowed, _ = TRANSITIONS[operation]
        handle = self.get_handle(container_id)
        phase = handle.phase if handle else ContainerPhase.ABSENT
        if handle is None or phase not in allowed:
            raise LifecycleError(
                f"Cannot {operation} container in phase '{phase.value}'",
                context={"container_id": container_id[:12], "phase": phase.value},
            )
        return handle

    def _reject_if_killed(self, container_id: str) -> None:
        if self.phase_of(container_id) == ContainerPhase.KILLED:
            raise LifecycleError(
                "Container was already killed",
                context={"container_id": container_id[:12], "phase": ContainerPhase.KILLED.value},
            )

    # System Information

    async def ping(self) -> bool:
        """
        Check if the daemon is reachable

        Returns:
            True if the daemon answers /_ping
        """
        try:
            await self._request("GET", DockerEndpoints.PING)
            return True
        except DockerException as e:
            logger.debug(f"Docker ping failed: {e}")
            return False

    async def get_version(self) -> dict[str, Any]:
        """
        Get daemon version information

        Raises:
            DockerConnectionError: If the daemon socket is unreachable
        """
        logger.info("Getting docker version")
        response = await self._request("GET", DockerEndpoints.VERSION)
        return self._json(response)

    async def get_events(self, since: int | None = None, until: int | None = None) -> list[dict]:
        """
        Get daemon events between two UNIX timestamps

        Args:
            since: Start timestamp (default: daemon's own default)
            until: End timestamp (default: now, so the request terminates)

        Returns:
            List of event dicts
        """
        params: dict[str, Any] = {"until": until if until is not None else int(time.time())}
        if since is not None:
            params["since"] = since

        response = await self._request("GET", DockerEndpoints.EVENTS, params=params)

        events = []
        for line in response.text.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except ValueError as e:
                raise DaemonError(
                    "Malformed event in daemon response",
                    status_code=response.status_code,
                    body=line[:MAX_ERROR_BODY],
                ) from e
        return events

    # Images

    async def list_images(self, show_all: bool = True) -> list[dict]:
        """List images known to the daemon"""
        response = await self._request(
            "GET", DockerEndpoints.IMAGES_LIST, params={"all": str(show_all).lower()}
        )
        return self._json(response)

    async def inspect_image(self, image_id: str) -> dict[str, Any]:
        """
        Inspect an image

        Raises:
            NotFoundError: If the image does not exist
        """
        endpoint = DockerEndpoints.IMAGE_INSPECT.format(image_id=image_id)
        response = await self._request("GET", endpoint, context={"image": image_id})
        return self._json(response)

    # Containers (read-only)

    async def list_containers(self, show_all: bool = False) -> list[dict]:
        """List containers (running only unless show_all=True)"""
        endpoint = DockerEndpoints.CONTAINERS_LIST
        logger.info(f"Attempt to fetch containers from {endpoint}")
        response = await self._request("GET", endpoint, params={"all": str(show_all).lower()})
        return self._json(response)

    async def inspect_container(self, container_id: str) -> dict[str, Any]:
        """
        Inspect a container

        Raises:
            NotFoundError: If the container does not exist
        """
        self._reject_if_killed(container_id)
        endpoint = DockerEndpoints.CONTAINER_INSPECT.format(container_id=container_id)
        response = await self._request("GET", endpoint, context={"container_id": container_id[:12]})
        return self._json(response)

    async def list_processes(self, container_id: str) -> dict[str, Any]:
        """List processes running inside a container (Titles + Processes)"""
        self._reject_if_killed(container_id)
        endpoint = DockerEndpoints.CONTAINER_TOP.format(container_id=container_id)
        response = await self._request("GET", endpoint, context={"container_id": container_id[:12]})
        return self._json(response)

    async def get_logs(self, container_id: str, stderr: bool = False, tail: int | None = None) -> str:
        """
        Get container stdout (and optionally stderr) as text

        Args:
            container_id: Container id or name
            stderr: Include stderr
            tail: Only return this many trailing lines
        """
        self._reject_if_killed(container_id)
        endpoint = DockerEndpoints.CONTAINER_LOGS.format(container_id=container_id)
        params: dict[str, Any] = {"stdout": "true"}
        if stderr:
            params["stderr"] = "true"
        if tail is not None:
            params["tail"] = str(tail)
        response = await self._request(
            "GET", endpoint, params=params, context={"container_id": container_id[:12]}
        )
        return decode_output(response)

    # Lifecycle

    async def adopt_container(self, container_id: str) -> ContainerHandle:
        """
        Track a container this client did not create, using the daemon's state

        Lets a fresh process (the CLI, a restarted backend) stop notebooks
        launched earlier. A running container is adopted as started, a
        never-started one as created. The handle is keyed by the daemon's
        full id whatever form (short id, name) the caller used.

        Raises:
            NotFoundError: If the container does not exist
            LifecycleError: If the container has already exited
        """
        handle = self.get_handle(container_id)
        if handle is not None:
            return handle

        info = await self.inspect_container(container_id)
        full_id = info.get("Id") or container_id
        handle = self._handles.get(full_id)
        if handle is not None:
            return handle

        state = info.get("State") or {}
        if state.get("Running"):
            phase = ContainerPhase.STARTED
        elif state.get("Status") == "created":
            phase = ContainerPhase.CREATED
        else:
            raise LifecycleError(
                f"Container is not running (status '{state.get('Status', 'unknown')}')",
                context={"container_id": container_id[:12]},
            )

        handle = ContainerHandle(container_id=full_id, phase=phase)
        self._handles[full_id] = handle

        logger.info(f"Adopted container {handle.short_id} in phase '{phase.value}'")
        return handle

    async def create_container(self, spec: ContainerSpec) -> str:
        """
        Create a notebook container

        Args:
            spec: Image, bind mount and optional name

        Returns:
            Daemon-assigned container id

        Raises:
            ValidationError: If the daemon rejects the payload
            NotFoundError: If the image does not exist locally
            DaemonError: Any other failure
        """
        params = {"name": spec.name} if spec.name else None
        response = await self._request(
            "POST",
            DockerEndpoints.CONTAINER_CREATE,
            expected=(201,),
            params=params,
            json_body=spec.to_create_payload(),
            context={"image": spec.image},
        )

        body = self._json(response)
        container_id = body.get("Id") if isinstance(body, dict) else None
        if not container_id:
            raise DaemonError(
                "Create response did not include a container id",
                status_code=response.status_code,
                body=response.text[:MAX_ERROR_BODY],
            )

        for warning in body.get("Warnings") or []:
            logger.warning(f"Docker create warning: {warning}")

        handle = ContainerHandle(container_id=container_id)
        handle.advance(ContainerPhase.CREATED, response.status_code)
        self._handles[container_id] = handle

        logger.info(f"Created container {handle.short_id} from {spec.image}")
        return container_id

    async def start_container(self, container_id: str) -> None:
        """
        Start a created container

        Raises:
            LifecycleError: If the container is not in the created phase
            DaemonError: On any response other than an empty 204
        """
        handle = self._require(container_id, "start")
        endpoint = DockerEndpoints.CONTAINER_START.format(container_id=handle.container_id)
        response = await self._request(
            "POST", endpoint, expected=(204,), context={"container_id": handle.short_id}
        )
        if response.content:
            raise DaemonError(
                "Unexpected body in start response",
                context={"container_id": handle.short_id},
                status_code=response.status_code,
                body=response.text[:MAX_ERROR_BODY],
            )

        handle.advance(ContainerPhase.STARTED, response.status_code)
        logger.info(f"Started container {handle.short_id}")

    async def attach_container(self, container_id: str) -> str:
        """
        Attach to a started container and extract the notebook URL

        The whole body (buffered logs plus stdout) is scanned once.
        On ParseError the container stays in the started phase, so the
        caller may attach again.

        Returns:
            Notebook URL, e.g. http://172.17.0.2:8888/lab?token=abc123

        Raises:
            LifecycleError: If the container is not in the started phase
            ParseError: If no notebook URL is found
        """
        handle = self._require(container_id, "attach")
        endpoint = DockerEndpoints.CONTAINER_ATTACH.format(container_id=handle.container_id)
        response = await self._request(
            "POST",
            endpoint,
            expected=(200, 101),
            params={"logs": "true", "stdout": "true"},
            context={"container_id": handle.short_id},
        )

        output = decode_output(response)
        url = find_notebook_url(output)
        if url is None:
            raise ParseError(
                "No notebook URL found in attach output",
                context={"container_id": handle.short_id},
                status_code=response.status_code,
                body=output[-MAX_ERROR_BODY:],
            )

        handle.advance(ContainerPhase.ATTACHED, response.status_code)
        handle.url = url
        logger.info(f"Container {handle.short_id} notebook ready at {url}")

        if self.listener is not None:
            await self.listener.on_ready(handle.container_id, url)
        return url

    async def kill_container(self, container_id: str, signal: str | None = None) -> None:
        """
        Kill a container and signal teardown of its presentation surface

        Args:
            container_id: Container id
            signal: Optional signal name (daemon default is SIGKILL)

        Raises:
            LifecycleError: If the container is absent or already killed
        """
        handle = self._require(container_id, "kill")
        endpoint = DockerEndpoints.CONTAINER_KILL.format(container_id=handle.container_id)
        params = {"signal": signal} if signal else None
        response = await self._request(
            "POST",
            endpoint,
            expected=(204,),
            params=params,
            context={"container_id": handle.short_id},
        )

        handle.advance(ContainerPhase.KILLED, response.status_code)
        logger.info(f"Killed container {handle.short_id}")

        if self.listener is not None:
            await self.listener.on_teardown(handle.container_id)

    async def remove_container(self, container_id: str, force: bool = False) -> None:
        """
        Remove a container that was created but never started

        The handle is forgotten afterwards; the container is absent again.

        Raises:
            LifecycleError: If the container is not in the created phase
        """
        handle = self._require(container_id, "remove")
        endpoint = DockerEndpoints.CONTAINER_REMOVE.format(container_id=handle.container_id)
        await self._request(
            "DELETE",
            endpoint,
            expected=(204,),
            params={"force": "true"} if force else None,
            context={"container_id": handle.short_id},
        )

        self._handles.pop(handle.container_id, None)
        logger.info(f"Removed container {handle.short_id}")
