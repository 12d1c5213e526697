"""
Presentation state for embedded notebook panes
"""

from tosbur.presentation.sessions import BrowserSession, BrowserSessionRegistry

__all__ = [
    "BrowserSession",
    "BrowserSessionRegistry",
]
