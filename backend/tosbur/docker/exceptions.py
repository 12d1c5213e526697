"""
Docker client exceptions with recovery hints

Every failure the lifecycle client surfaces is one of these. Each carries the
HTTP status and response body (when there was one) plus a recovery hint for
the UI.
"""


class DockerException(Exception):
    """Base exception for all Docker client errors"""

    default_hint = ""

    def __init__(
        self,
        message: str,
        recovery_hint: str = "",
        context: dict | None = None,
        status_code: int | None = None,
        body: str | None = None,
    ):
        self.message = message
        self.recovery_hint = recovery_hint or self.default_hint
        self.context = context or {}
        self.status_code = status_code
        self.body = body
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format exception message with context and recovery hint"""
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"(HTTP {self.status_code})")
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[{context_str}]")
        if self.recovery_hint:
            parts.append(f"Hint: {self.recovery_hint}")
        return " ".join(parts)


class DockerConnectionError(DockerException):
    """Raised when the daemon cannot be reached (refused, timeout, broken stream)"""

    default_hint = "Check the Docker socket path and that the daemon is reachable."


class DaemonNotRunningError(DockerConnectionError):
    """Raised when the configured daemon socket refuses connections or is missing"""

    default_hint = "Cannot connect to Docker. Is it running? Start Docker Desktop or the docker service."


class DaemonError(DockerException):
    """Raised when the daemon answers with an unexpected status or body"""

    default_hint = "Check the daemon logs for details."


class ValidationError(DaemonError):
    """Raised when the daemon rejects a request body the client built"""

    default_hint = "Check the image name and mount path."


class NotFoundError(DaemonError):
    """Raised when an id-addressed resource (image, container) does not exist"""

    default_hint = "Verify the image is pulled and the container id is correct."


class ParseError(DockerException):
    """Raised when a response body lacks an expected pattern"""

    default_hint = "The notebook server may not have printed its URL yet. Try again shortly."


class LifecycleError(DockerException):
    """Raised when an operation is called out of lifecycle order; no request is sent"""

    default_hint = "Containers must be created, then started, then attached."
