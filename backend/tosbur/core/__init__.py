"""
Core infrastructure: settings and shared protocols
"""

from tosbur.core.config import Settings, get_settings
from tosbur.core.interfaces import EventPublisher, LifecycleListener

__all__ = [
    "Settings",
    "get_settings",
    "EventPublisher",
    "LifecycleListener",
]
