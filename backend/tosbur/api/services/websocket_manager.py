"""
WebSocket Manager - Centralized WebSocket connection management

Manages WebSocket connections and broadcasts notebook lifecycle events
(notebook_ready, teardown) to the desktop UI.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """
    Manages WebSocket connections and broadcasts

    Responsibilities:
    - Track active WebSocket connections
    - Broadcast lifecycle events from the browser session registry
    - Send keepalive pings
    - Handle connection cleanup
    """

    def __init__(self, keepalive_interval: int = 15):
        """
        Initialize WebSocket manager

        Args:
            keepalive_interval: Seconds between server keepalive pings (default: 15)
        """
        self._connections: list[WebSocket] = []
        self._lock = asyncio.Lock()
        self._keepalive_tasks: dict[WebSocket, asyncio.Task] = {}
        self._keepalive_interval = keepalive_interval

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        """
        Add new WebSocket connection

        Args:
            websocket: WebSocket connection to add
        """
        await websocket.accept()
        async with self._lock:
            self._connections.append(websocket)
            task = asyncio.create_task(self._keepalive_loop(websocket))
            self._keepalive_tasks[websocket] = task
            logger.info(f"WebSocket connected. Total connections: {len(self._connections)}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """
        Remove WebSocket connection

        Args:
            websocket: WebSocket connection to remove
        """
        async with self._lock:
            if websocket in self._connections:
                self._connections.remove(websocket)
                task = self._keepalive_tasks.pop(websocket, None)
                if task:
                    task.cancel()
                logger.info(
                    f"WebSocket disconnected. Total connections: {len(self._connections)}"
                )

    async def _keepalive_loop(self, websocket: WebSocket) -> None:
        """
        Send periodic keepalive pings to prevent connection timeout

        Args:
            websocket: WebSocket connection to keep alive
        """
        try:
            while True:
                await asyncio.sleep(self._keepalive_interval)

                try:
                    await websocket.send_json(
                        {"type": "keepalive", "timestamp": datetime.now(UTC).isoformat()}
                    )
                except Exception as e:
                    logger.warning(f"Failed to send keepalive to {websocket.client}: {e}")
                    # Connection is dead, will be cleaned up by disconnect()
                    break

        except asyncio.CancelledError:
            logger.debug(f"Keepalive task cancelled for {websocket.client}")

    async def broadcast_event(self, event: dict[str, Any]) -> None:
        """
        Broadcast a lifecycle event to all connected clients

        Args:
            event: Event dict with "type" and "data" keys
        """
        if not self._connections:
            logger.warning(
                f"Broadcasting {event.get('type')} with no WebSocket connections; "
                "the UI will pick it up from GET /api/notebooks"
            )
        await self._broadcast(event)

    async def _broadcast(self, message: dict) -> None:
        """
        Send message to all connected clients

        Args:
            message: Message dictionary to broadcast
        """
        disconnected = []

        async with self._lock:
            for ws in self._connections:
                try:
                    await ws.send_json(message)
                except Exception as e:
                    logger.warning(f"Failed to send message to WebSocket: {e}")
                    disconnected.append(ws)

            for ws in disconnected:
                self._connections.remove(ws)
                task = self._keepalive_tasks.pop(ws, None)
                if task:
                    task.cancel()

        if disconnected:
            logger.info(f"Removed {len(disconnected)} disconnected WebSocket(s)")

    async def close_all(self) -> None:
        """
        Close all WebSocket connections (called on shutdown)
        """
        logger.info("Closing all WebSocket connections...")

        async with self._lock:
            for task in self._keepalive_tasks.values():
                task.cancel()
            self._keepalive_tasks.clear()

            for ws in self._connections:
                try:
                    await ws.close()
                except Exception as e:
                    logger.warning(f"Error closing WebSocket: {e}")

            self._connections.clear()

        logger.info("All WebSocket connections closed")
