"""
Tests for WebSocketManager
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from tosbur.api.services.websocket_manager import WebSocketManager


class FakeWebSocket:
    def __init__(self):
        self.client = "test-client"
        self.sent: list[dict] = []

    async def accept(self) -> None:
        pass

    async def send_json(self, data: dict) -> None:
        self.sent.append(data)


class TestKeepalive:
    """Tests for the keepalive loop"""

    @pytest.mark.asyncio
    async def test_keepalive_timestamp_is_utc(self):
        manager = WebSocketManager(keepalive_interval=0)
        websocket = FakeWebSocket()

        await manager.connect(websocket)
        while not websocket.sent:
            await asyncio.sleep(0)
        await manager.disconnect(websocket)

        message = websocket.sent[0]
        assert message["type"] == "keepalive"
        assert datetime.fromisoformat(message["timestamp"]).utcoffset() == timedelta(0)
        assert manager.connection_count == 0
