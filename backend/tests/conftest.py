"""
Shared test fixtures for Tosbur

The Docker daemon is replaced by FakeDaemon, an httpx.MockTransport handler
that serves canned responses keyed by (method, path) and records every
request it sees.
"""

from collections import deque

import httpx
import pytest
import pytest_asyncio

from tosbur.docker.client import DockerClient

CONTAINER_ID = "4f66ad9a0b2e4c1d8e7f6a5b4c3d2e1f0a9b8c7d6e5f4a3b2c1d0e9f8a7b6c5d"
NOTEBOOK_URL = "http://172.17.0.2:8888/lab?token=abc123"
READY_BANNER = (
    "[I 2024-05-01 10:00:00.000 ServerApp] Jupyter Server is running at:\n"
    f"[I 2024-05-01 10:00:00.000 ServerApp] {NOTEBOOK_URL}\n"
    "[I 2024-05-01 10:00:00.000 ServerApp]     http://127.0.0.1:8888/lab?token=abc123\n"
)


class FakeDaemon:
    """
    Canned Docker daemon

    Register responses with on(); several registrations for the same route
    are served in order, the last one repeating.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], deque] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, **response_kwargs) -> "FakeDaemon":
        self.routes.setdefault((method, path), deque()).append((status, response_kwargs))
        return self

    def fail(self, method: str, path: str, exc: Exception) -> "FakeDaemon":
        self.routes.setdefault((method, path), deque()).append(exc)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and self.route_path(r) == path]

    @staticmethod
    def route_path(request: httpx.Request) -> str:
        # Drop the version segment: /v1.41/containers/json -> /containers/json
        parts = request.url.path.split("/", 2)
        return "/" + parts[2] if len(parts) > 2 else request.url.path

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, self.route_path(request)))
        if not queue:
            return httpx.Response(404, json={"message": "page not found"})

        entry = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(entry, Exception):
            raise entry
        status, response_kwargs = entry
        return httpx.Response(status, **response_kwargs)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def serve_notebook(self, container_id: str = CONTAINER_ID, banner: str = READY_BANNER) -> "FakeDaemon":
        """Register the happy create -> start -> attach -> kill sequence, plus removal"""
        self.on("POST", "/containers/create", 201, json={"Id": container_id, "Warnings": []})
        self.on("POST", f"/containers/{container_id}/start", 204)
        self.on("POST", f"/containers/{container_id}/attach", 200, text=banner)
        self.on("POST", f"/containers/{container_id}/kill", 204)
        self.on("DELETE", f"/containers/{container_id}", 204)
        return self


class RecordingListener:
    """LifecycleListener that remembers every notification"""

    def __init__(self):
        self.ready: list[tuple[str, str]] = []
        self.teardowns: list[str] = []

    async def on_ready(self, container_id: str, url: str) -> None:
        self.ready.append((container_id, url))

    async def on_teardown(self, container_id: str) -> None:
        self.teardowns.append(container_id)


@pytest.fixture
def daemon() -> FakeDaemon:
    return FakeDaemon()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest_asyncio.fixture
async def client(daemon: FakeDaemon, listener: RecordingListener):
    docker_client = DockerClient(
        socket_path="/var/run/docker.sock",
        api_version="v1.41",
        timeout=5.0,
        listener=listener,
        transport=daemon.transport(),
    )
    yield docker_client
    await docker_client.close()
