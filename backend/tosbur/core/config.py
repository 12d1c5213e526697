"""
Configuration management

Centralized settings using Pydantic BaseSettings for type-safe configuration
with environment variable support.
"""

import logging
import re
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_DOCKER_SOCKET = "/var/run/docker.sock"
DEFAULT_API_VERSION = "v1.41"

# Electron-style socket URL, e.g. http://unix:/var/run/docker.sock:/v1.41
_IPC_SOCKET_PATTERN = re.compile(
    r"^(?:https?://)?unix:(?P<path>/[^:]+)(?::(?P<version>/?v?\d+(?:\.\d+)*)/?)?$"
)


def get_package_root() -> Path:
    """Directory containing the tosbur/ package"""
    return Path(__file__).parent.parent.parent.resolve()


def parse_ipc_socket(value: str) -> tuple[str, str | None]:
    """
    Split a DOCKER_IPC_SOCKET URL into socket path and API version

    Args:
        value: URL such as "http://unix:/var/run/docker.sock:/v1.41"

    Returns:
        Tuple of (socket_path, api_version or None)

    Raises:
        ValueError: If the value is not a unix socket URL
    """
    match = _IPC_SOCKET_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Not a unix socket URL: {value}")
    version = match.group("version")
    if version:
        version = normalize_api_version(version)
    return match.group("path"), version


def normalize_api_version(version: str) -> str:
    """Return the version as a path segment: "1.41", "/v1.41" -> "v1.41" """
    version = version.strip().strip("/")
    if not version.startswith("v"):
        version = f"v{version}"
    return version


class Settings(BaseSettings):
    """
    Application settings with environment variable support

    Settings can be overridden via environment variables:
    - TOSBUR_DOCKER_SOCKET=/run/user/1000/docker.sock
    - TOSBUR_API_PORT=8000
    - DOCKER_IPC_SOCKET=http://unix:/var/run/docker.sock:/v1.41
    """

    # Docker daemon
    docker_socket: str = DEFAULT_DOCKER_SOCKET
    docker_api_version: str = DEFAULT_API_VERSION
    docker_timeout: float = 30.0
    docker_ipc_socket: str = Field(
        default="",
        validation_alias=AliasChoices("DOCKER_IPC_SOCKET", "TOSBUR_DOCKER_IPC_SOCKET"),
    )

    # Notebooks
    notebook_image: str = "jupyter/base-notebook"
    notebook_host_port: str = "8888"
    attach_retries: int = 5
    attach_retry_delay: float = 2.0

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 5000
    cors_origins: list[str] = ["*"]

    # Environment
    environment: str = "production"
    log_level: str = "INFO"
    log_capture_entries: int = 2000

    model_config = SettingsConfigDict(
        env_prefix="TOSBUR_",
        env_file=str(get_package_root() / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """Initialize settings and apply DOCKER_IPC_SOCKET if provided"""
        super().__init__(**kwargs)

        self.docker_api_version = normalize_api_version(self.docker_api_version)

        # The Electron shell passes the daemon location as a single URL
        if self.docker_ipc_socket:
            try:
                socket_path, version = parse_ipc_socket(self.docker_ipc_socket)
            except ValueError as e:
                logger.warning(f"Ignoring DOCKER_IPC_SOCKET: {e}")
            else:
                self.docker_socket = socket_path
                if version:
                    self.docker_api_version = version


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment"""
    global _settings
    _settings = None


def is_dev_mode() -> bool:
    """
    Check if running in development mode

    Returns:
        bool: True if environment is development
    """
    settings = get_settings()
    return settings.environment.lower() in ("development", "dev")
