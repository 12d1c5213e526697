"""
Tests for the API server

The app runs under FastAPI's TestClient with a DockerClient wired to a
FakeDaemon transport.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import CONTAINER_ID, NOTEBOOK_URL
from tosbur.api.app import create_app
from tosbur.api.services.log_capture import get_log_capture
from tosbur.core.config import Settings
from tosbur.docker.client import DockerClient


@pytest.fixture
def settings():
    return Settings(_env_file=None, attach_retries=0, attach_retry_delay=0)


@pytest.fixture
def api(settings, daemon):
    docker_client = DockerClient(transport=daemon.transport())
    app = create_app(settings, docker_client=docker_client)
    with TestClient(app) as test_client:
        yield test_client


def error_of(response: httpx.Response) -> dict:
    return response.json()["detail"]


class TestHealth:
    """Tests for health endpoints"""

    def test_healthy(self, api, daemon):
        daemon.on("GET", "/_ping", 200, text="OK")

        response = api.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["docker"]["reachable"] is True
        assert data["docker"]["api_version"] == "v1.41"

    def test_degraded_without_docker(self, api, daemon):
        daemon.fail("GET", "/_ping", httpx.ConnectError("Connection refused"))

        data = api.get("/health").json()

        assert data["status"] == "degraded"
        assert data["warnings"] == ["Cannot connect to Docker. Is it running?"]

    def test_live(self, api):
        assert api.get("/health/live").json() == {"status": "alive"}

    def test_ready(self, api, daemon):
        daemon.on("GET", "/_ping", 200, text="OK")

        response = api.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"ready": True}

    def test_not_ready(self, api, daemon):
        daemon.fail("GET", "/_ping", httpx.ConnectError("Connection refused"))

        response = api.get("/health/ready")

        assert response.status_code == 503
        assert response.json() == {"ready": False}


class TestDockerRoutes:
    """Tests for /api/docker"""

    def test_version(self, api, daemon):
        daemon.on("GET", "/version", 200, json={"Version": "24.0.7", "ApiVersion": "1.43"})

        response = api.get("/api/docker/version")

        assert response.status_code == 200
        assert response.json()["Version"] == "24.0.7"

    def test_daemon_not_running(self, api, daemon):
        daemon.fail("GET", "/version", httpx.ConnectError("[Errno 111] Connection refused"))

        response = api.get("/api/docker/version")

        assert response.status_code == 503
        error = error_of(response)
        assert error["error"] == "daemon_not_running"
        assert error["recovery_hint"]

    def test_list_images_all_param(self, api, daemon):
        daemon.on("GET", "/images/json", 200, json=[])

        response = api.get("/api/docker/images", params={"all": "false"})

        assert response.status_code == 200
        assert daemon.calls("GET", "/images/json")[0].url.params["all"] == "false"

    def test_inspect_image_with_slash(self, api, daemon):
        daemon.on("GET", "/images/jupyter/base-notebook/json", 200, json={"Id": "sha256:abc"})

        response = api.get("/api/docker/images/jupyter/base-notebook")

        assert response.status_code == 200
        assert response.json()["Id"] == "sha256:abc"

    def test_inspect_missing_container(self, api):
        response = api.get("/api/docker/containers/missing")

        assert response.status_code == 404
        error = error_of(response)
        assert error["error"] == "not_found"
        assert error["details"]["daemon_status"] == 404

    def test_list_containers(self, api, daemon):
        daemon.on("GET", "/containers/json", 200, json=[{"Id": CONTAINER_ID, "Image": "jupyter/base-notebook"}])

        response = api.get("/api/docker/containers")

        assert response.json()[0]["Id"] == CONTAINER_ID

    def test_daemon_failure(self, api, daemon):
        daemon.on("GET", "/containers/json", 500, json={"message": "server error"})

        response = api.get("/api/docker/containers")

        assert response.status_code == 502
        assert error_of(response)["error"] == "daemon_error"

    def test_top(self, api, daemon):
        daemon.on("GET", f"/containers/{CONTAINER_ID}/top", 200, json={"Titles": ["PID"], "Processes": [["1"]]})

        response = api.get(f"/api/docker/containers/{CONTAINER_ID}/top")

        assert response.json()["Titles"] == ["PID"]

    def test_logs_plain_text(self, api, daemon):
        daemon.on("GET", f"/containers/{CONTAINER_ID}/logs", 200, text="line one\nline two\n")

        response = api.get(f"/api/docker/containers/{CONTAINER_ID}/logs", params={"tail": 2})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "line one\nline two\n"

    def test_events(self, api, daemon):
        daemon.on("GET", "/events", 200, text='{"Type": "container", "Action": "start"}\n')

        response = api.get("/api/docker/events", params={"since": 10, "until": 20})

        assert response.json() == [{"Type": "container", "Action": "start"}]


class TestNotebookRoutes:
    """Tests for /api/notebooks"""

    def test_launch(self, api, daemon):
        daemon.serve_notebook()

        response = api.post("/api/notebooks", json={"mount": "/home/user/work"})

        assert response.status_code == 201
        data = response.json()
        assert data["container_id"] == CONTAINER_ID
        assert data["url"] == NOTEBOOK_URL
        assert data["image"] == "jupyter/base-notebook"
        assert data["session_id"]

    def test_launch_opens_pane(self, api, daemon):
        daemon.serve_notebook()
        session_id = api.post("/api/notebooks", json={"mount": "/home/user/work"}).json()["session_id"]

        panes = api.get("/api/notebooks").json()

        assert [(p["session_id"], p["url"]) for p in panes] == [(session_id, NOTEBOOK_URL)]

    def test_launch_with_image(self, api, daemon):
        daemon.serve_notebook()

        api.post("/api/notebooks", json={"mount": "/tmp", "image": "jupyter/scipy-notebook"})

        request = daemon.calls("POST", "/containers/create")[0]
        assert json.loads(request.content)["Image"] == "jupyter/scipy-notebook"

    def test_launch_requires_mount(self, api, daemon):
        response = api.post("/api/notebooks", json={"mount": ""})

        assert response.status_code == 422
        assert daemon.calls("POST", "/containers/create") == []

    def test_launch_missing_image(self, api, daemon):
        daemon.on("POST", "/containers/create", 404, json={"message": "No such image: jupyter/base-notebook"})

        response = api.post("/api/notebooks", json={"mount": "/tmp"})

        assert response.status_code == 404
        assert error_of(response)["message"] == "No such image: jupyter/base-notebook"

    def test_launch_rejected_payload(self, api, daemon):
        daemon.on("POST", "/containers/create", 400, json={"message": "invalid mount config"})

        response = api.post("/api/notebooks", json={"mount": "relative/path"})

        assert response.status_code == 422
        assert error_of(response)["error"] == "validation_error"

    def test_launch_without_url(self, api, daemon):
        daemon.serve_notebook(banner="Starting...\n")

        response = api.post("/api/notebooks", json={"mount": "/tmp"})

        assert response.status_code == 502
        error = error_of(response)
        assert error["error"] == "parse_error"
        assert "Starting..." in error["details"]["daemon_body"]

    def test_stop(self, api, daemon):
        daemon.serve_notebook()
        api.post("/api/notebooks", json={"mount": "/tmp"})

        response = api.delete(f"/api/notebooks/{CONTAINER_ID}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "container_id": CONTAINER_ID}
        assert api.get("/api/notebooks").json() == []

    def test_stop_twice(self, api, daemon):
        daemon.serve_notebook()
        api.post("/api/notebooks", json={"mount": "/tmp"})
        api.delete(f"/api/notebooks/{CONTAINER_ID}")

        response = api.delete(f"/api/notebooks/{CONTAINER_ID}")

        assert response.status_code == 409
        assert error_of(response)["error"] == "lifecycle_error"

    def test_stop_unknown(self, api):
        response = api.delete("/api/notebooks/missing")

        assert response.status_code == 404

    def test_bounds(self, api, daemon):
        daemon.serve_notebook()
        api.post("/api/notebooks", json={"mount": "/tmp"})

        response = api.get(
            f"/api/notebooks/{CONTAINER_ID}/bounds", params={"width": 1280, "height": 800}
        )

        assert response.json() == {"x": 36, "y": 36, "width": 1244, "height": 800}

    def test_bounds_without_pane(self, api):
        response = api.get(
            f"/api/notebooks/{CONTAINER_ID}/bounds", params={"width": 1280, "height": 800}
        )

        assert response.status_code == 404
        assert error_of(response)["error"] == "not_found"


class TestEventsWebSocket:
    """Tests for /ws/events"""

    def test_ping_pong(self, api):
        with api.websocket_connect("/ws/events") as ws:
            ws.send_json({"type": "ping", "timestamp": 123})

            assert ws.receive_json() == {"type": "pong", "timestamp": 123}

    def test_lifecycle_events_broadcast(self, api, daemon):
        daemon.serve_notebook()

        with api.websocket_connect("/ws/events") as ws:
            api.post("/api/notebooks", json={"mount": "/tmp"})
            ready = ws.receive_json()

            api.delete(f"/api/notebooks/{CONTAINER_ID}")
            teardown = ws.receive_json()

        assert ready["type"] == "notebook_ready"
        assert ready["data"]["url"] == NOTEBOOK_URL
        assert teardown == {
            "type": "teardown",
            "data": {"container_id": CONTAINER_ID, "session_id": ready["data"]["session_id"]},
        }


class TestLogRoutes:
    """Tests for /api/logs"""

    def test_get_logs(self, api):
        data = api.get("/api/logs", params={"limit": 10}).json()

        assert set(data) == {"logs", "total", "filtered"}
        assert data["filtered"] <= 10

    def test_stats(self, api):
        data = api.get("/api/logs/stats").json()

        assert data["max_entries"] > 0

    def test_clear(self, api):
        response = api.delete("/api/logs")

        assert response.json() == {"success": True}
        assert len(get_log_capture().logs) == 0
