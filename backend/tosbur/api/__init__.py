"""
Local HTTP/WebSocket API for the desktop shell
"""

from tosbur.api.app import create_app

__all__ = ["create_app"]
