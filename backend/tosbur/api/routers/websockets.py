"""
WebSocket endpoints router

Streams notebook lifecycle events (notebook_ready, teardown) to the UI.
"""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websockets"])


@router.websocket("/ws/events")
async def events_endpoint(websocket: WebSocket):
    """
    WebSocket for lifecycle events with heartbeat support

    Server -> client: {"type": "notebook_ready" | "teardown" | "keepalive", ...}
    Client -> server: {"type": "ping", "timestamp": ...} is answered with a pong.
    """
    websocket_manager = websocket.app.state.services.websocket_manager

    await websocket_manager.connect(websocket)
    logger.info(f"WebSocket connection accepted from {websocket.client}")

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "pong", "data": data})
                continue

            msg_type = message.get("type") if isinstance(message, dict) else None
            if msg_type == "ping":
                await websocket.send_json({"type": "pong", "timestamp": message.get("timestamp")})
                logger.debug("Client heartbeat ping received and acknowledged")
            elif msg_type == "pong":
                logger.debug("Client acknowledged server keepalive")
            else:
                await websocket.send_json({"type": "pong", "data": data})

    except WebSocketDisconnect:
        await websocket_manager.disconnect(websocket)
        logger.info("WebSocket client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        await websocket_manager.disconnect(websocket)
