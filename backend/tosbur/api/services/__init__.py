"""
API Services Package
"""

from tosbur.api.services.app_services import AppServices
from tosbur.api.services.log_capture import get_log_capture, setup_log_capture
from tosbur.api.services.websocket_manager import WebSocketManager

__all__ = [
    "AppServices",
    "WebSocketManager",
    "get_log_capture",
    "setup_log_capture",
]
