"""
Docker data models
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tosbur.docker.exceptions import ValidationError

NOTEBOOK_PORT = "8888/tcp"
NOTEBOOK_MOUNT_TARGET = "/home/jovyan/"

# Fields every notebook container is created with
CREATE_BASELINE: dict[str, Any] = {
    "AttachStdin": False,
    "AttachStdout": True,
    "AttachStderr": False,
    "OpenStdin": False,
    "Tty": True,
}


class ContainerPhase(str, Enum):
    """Lifecycle phase of a container managed by the client"""

    ABSENT = "absent"
    CREATED = "created"
    STARTED = "started"
    ATTACHED = "attached"
    KILLED = "killed"


# Phase an operation requires -> phase it moves to on success
TRANSITIONS: dict[str, tuple[frozenset[ContainerPhase], ContainerPhase]] = {
    "start": (frozenset({ContainerPhase.CREATED}), ContainerPhase.STARTED),
    "attach": (frozenset({ContainerPhase.STARTED}), ContainerPhase.ATTACHED),
    "kill": (
        frozenset({ContainerPhase.CREATED, ContainerPhase.STARTED, ContainerPhase.ATTACHED}),
        ContainerPhase.KILLED,
    ),
    # Removal forgets the handle; only never-started containers are removed
    "remove": (frozenset({ContainerPhase.CREATED}), ContainerPhase.ABSENT),
}


@dataclass(frozen=True)
class ContainerSpec:
    """
    Launch request for a notebook container

    Attributes:
        image: Image reference (e.g., "jupyter/base-notebook")
        mount: Host directory bind-mounted at /home/jovyan/ in the container
        name: Optional container name
        host_port: Host port published for the notebook server
    """

    image: str
    mount: str
    name: str | None = None
    host_port: str = "8888"

    def __post_init__(self):
        if not self.image or not self.image.strip():
            raise ValidationError("Image reference must not be empty", context={"image": self.image})
        if not self.mount or not self.mount.strip():
            raise ValidationError("Mount path must not be empty", context={"mount": self.mount})

    @property
    def bind(self) -> str:
        """Bind string in Docker's host:container form"""
        return f"{self.mount}:{NOTEBOOK_MOUNT_TARGET}"

    def to_create_payload(self) -> dict[str, Any]:
        """Build the JSON body for POST /containers/create"""
        payload = dict(CREATE_BASELINE)
        payload.update(
            {
                "Image": self.image,
                "ExposedPorts": {NOTEBOOK_PORT: {}},
                "HostConfig": {
                    "Binds": [self.bind],
                    "PortBindings": {NOTEBOOK_PORT: [{"HostPort": str(self.host_port)}]},
                },
            }
        )
        return payload

    def __repr__(self) -> str:
        return f"ContainerSpec(image='{self.image}', mount='{self.mount}')"


@dataclass
class ContainerHandle:
    """
    Client-side record of a container created in this session

    Attributes:
        container_id: Daemon-assigned identifier
        phase: Current lifecycle phase
        statuses: Last HTTP status seen for each phase transition
        url: Notebook URL extracted on attach
    """

    container_id: str
    phase: ContainerPhase = ContainerPhase.ABSENT
    statuses: dict[ContainerPhase, int] = field(default_factory=dict)
    url: str | None = None

    def advance(self, phase: ContainerPhase, status_code: int) -> None:
        """Record a successful transition"""
        self.phase = phase
        self.statuses[phase] = status_code

    @property
    def short_id(self) -> str:
        return self.container_id[:12]

    def __repr__(self) -> str:
        return f"ContainerHandle(id='{self.short_id}', phase='{self.phase.value}')"
