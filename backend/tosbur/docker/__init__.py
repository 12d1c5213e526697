"""
Docker Engine REST API client

Provides the async container lifecycle client used to run notebook servers:
- Daemon information (version, events)
- Image and container queries
- Container lifecycle (create, start, attach, kill)
"""

from tosbur.docker.client import DockerClient
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
from tosbur.docker.models import ContainerHandle, ContainerPhase, ContainerSpec
from tosbur.docker.stream import find_notebook_url

__all__ = [
    "DockerClient",
    "ContainerSpec",
    "ContainerHandle",
    "ContainerPhase",
    "find_notebook_url",
    "DockerException",
    "DockerConnectionError",
    "DaemonNotRunningError",
    "DaemonError",
    "ValidationError",
    "NotFoundError",
    "ParseError",
    "LifecycleError",
]
