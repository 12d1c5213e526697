"""
Browser session registry

Each notebook shown to the user gets its own BrowserSession, keyed by
container id. The registry listens to the Docker client's lifecycle
notifications and forwards them as events to subscribed publishers
(the WebSocket manager in the API server).
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tosbur.core.interfaces import EventPublisher

logger = logging.getLogger(__name__)

# Offset of the embedded pane from the window's top-left corner
PANE_INSET = 36


@dataclass
class BrowserSession:
    """
    Embedded browser pane showing one notebook

    Attributes:
        container_id: Container serving the notebook
        url: Notebook URL loaded in the pane
        session_id: Unique pane identifier
        opened_at: When the pane was opened
    """

    container_id: str
    url: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    opened_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def bounds(self, window_width: int, window_height: int) -> dict[str, int]:
        """Pane bounds inside a window of the given size"""
        return {
            "x": PANE_INSET,
            "y": PANE_INSET,
            "width": max(window_width - PANE_INSET, 0),
            "height": window_height,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict"""
        return {
            "session_id": self.session_id,
            "container_id": self.container_id,
            "url": self.url,
            "opened_at": self.opened_at.isoformat(),
        }


class BrowserSessionRegistry:
    """
    Presentation-side state for notebook panes

    Implements LifecycleListener: on_ready opens (or replaces) the pane for a
    container, on_teardown closes it. Every change is published as an event:

        {"type": "notebook_ready", "data": {...session...}}
        {"type": "teardown", "data": {"container_id": ..., "session_id": ...}}
    """

    def __init__(self):
        self._sessions: dict[str, BrowserSession] = {}
        self._publishers: list[EventPublisher] = []
        self._lock = asyncio.Lock()

    def subscribe(self, publisher: EventPublisher) -> None:
        """Register an async callback for lifecycle events"""
        if publisher not in self._publishers:
            self._publishers.append(publisher)

    def unsubscribe(self, publisher: EventPublisher) -> None:
        if publisher in self._publishers:
            self._publishers.remove(publisher)

    def get(self, container_id: str) -> BrowserSession | None:
        return self._sessions.get(container_id)

    def list_sessions(self) -> list[BrowserSession]:
        return list(self._sessions.values())

    async def on_ready(self, container_id: str, url: str) -> None:
        """Open a pane for the container's notebook"""
        async with self._lock:
            previous = self._sessions.get(container_id)
            session = BrowserSession(container_id=container_id, url=url)
            self._sessions[container_id] = session

        if previous is not None:
            logger.info(f"Replacing pane {previous.session_id} for {container_id[:12]}")
        logger.info(f"Opening notebook pane {session.session_id} at {url}")

        await self._publish({"type": "notebook_ready", "data": session.to_dict()})

    async def on_teardown(self, container_id: str) -> None:
        """Close the container's pane, if one is open"""
        async with self._lock:
            session = self._sessions.pop(container_id, None)

        logger.info(f"Tearing down notebook pane for {container_id[:12]}")

        await self._publish(
            {
                "type": "teardown",
                "data": {
                    "container_id": container_id,
                    "session_id": session.session_id if session else None,
                },
            }
        )

    async def _publish(self, event: dict[str, Any]) -> None:
        """Notify every publisher; a failing publisher does not stop the rest"""
        for publisher in list(self._publishers):
            try:
                await publisher(event)
            except Exception as e:
                logger.warning(f"Failed to publish {event.get('type')} event: {e}")
