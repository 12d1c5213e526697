#!/usr/bin/env python3
"""
Backend entry point for the Tosbur server.

Started by the Electron main process as a subprocess, or run directly.
Host, port and the Docker socket come from environment variables
(TOSBUR_API_HOST, TOSBUR_API_PORT, DOCKER_IPC_SOCKET).
"""

import logging
import sys
import traceback

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def global_exception_handler(exc_type, exc_value, exc_tb):
    """Log unhandled exceptions before the process dies."""
    logger.error("=" * 60)
    logger.error("UNHANDLED EXCEPTION - Backend is crashing!")
    logger.error("=" * 60)
    logger.error(f"Type: {exc_type.__name__}")
    logger.error(f"Value: {exc_value}")
    logger.error("Traceback:")
    for line in traceback.format_tb(exc_tb):
        for subline in line.strip().split("\n"):
            logger.error(f"  {subline}")
    logger.error("=" * 60)
    sys.stdout.flush()
    sys.stderr.flush()


sys.excepthook = global_exception_handler


def main():
    """Start the FastAPI backend server."""
    import uvicorn

    from tosbur.api.app import create_app
    from tosbur.core.config import get_settings

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(f"Starting Tosbur backend on {settings.api_host}:{settings.api_port}")
    logger.info(f"Docker socket: {settings.docker_socket} ({settings.docker_api_version})")

    try:
        uvicorn.run(
            create_app(settings),
            host=settings.api_host,
            port=settings.api_port,
            log_level=settings.log_level.lower(),
            reload=False,
            workers=1,
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Backend shutdown requested")
    except Exception as e:
        logger.error(f"Failed to start backend: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
