"""
Core interfaces and protocols

Defines the protocols that keep the Docker client independent of whoever
presents notebooks to the user.
"""

from typing import Any, Awaitable, Callable, Protocol

# Async callback receiving a lifecycle event dict
EventPublisher = Callable[[dict[str, Any]], Awaitable[None]]


class LifecycleListener(Protocol):
    """Receives the client's outward notifications"""

    async def on_ready(self, container_id: str, url: str) -> None:
        """Container is attached and its notebook is reachable at url"""
        ...

    async def on_teardown(self, container_id: str) -> None:
        """Container was killed; tear down any surface showing it"""
        ...
