"""
Log Capture Service

Captures backend logs in memory for UI access.
Provides a circular buffer of recent log entries.
"""

import logging
import re
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

# Short (12) or full (64) hex container ids
_CONTAINER_ID_PATTERN = re.compile(r"\b([0-9a-f]{64}|[0-9a-f]{12})\b")


@dataclass
class LogEntry:
    """A single log entry"""

    timestamp: str
    level: str
    logger: str
    message: str
    container_id: str | None = None


class LogCaptureHandler(logging.Handler):
    """
    Logging handler that captures logs to a circular buffer.
    Thread-safe for concurrent access.
    """

    def __init__(self, max_entries: int = 1000):
        super().__init__()
        self.max_entries = max_entries
        self.logs: deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

        self.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        """Capture a log record"""
        try:
            message = record.getMessage()

            container_id = None
            if "container" in message.lower() or "notebook" in message.lower():
                match = _CONTAINER_ID_PATTERN.search(message)
                if match:
                    container_id = match.group(1)[:12]

            entry = LogEntry(
                timestamp=datetime.now(UTC).isoformat(),
                level=record.levelname,
                logger=record.name,
                message=message,
                container_id=container_id,
            )

            with self._lock:
                self.logs.append(entry)

        except Exception:
            self.handleError(record)

    def get_logs(
        self,
        limit: int = 100,
        level: str | None = None,
        logger_filter: str | None = None,
        container_id: str | None = None,
    ) -> list[dict]:
        """
        Get recent logs with optional filtering.

        Args:
            limit: Maximum number of logs to return
            level: Filter by log level (INFO, WARNING, ERROR, etc.)
            logger_filter: Filter by logger name (substring match)
            container_id: Filter by container id (short or full)

        Returns:
            List of log entries as dicts, newest first
        """
        with self._lock:
            logs = list(self.logs)

        if level:
            logs = [entry for entry in logs if entry.level == level.upper()]

        if logger_filter:
            logs = [entry for entry in logs if logger_filter.lower() in entry.logger.lower()]

        if container_id:
            short_id = container_id[:12]
            logs = [entry for entry in logs if entry.container_id == short_id]

        logs = list(reversed(logs))[:limit]

        return [asdict(entry) for entry in logs]

    def get_stats(self) -> dict:
        """Get log statistics"""
        with self._lock:
            logs = list(self.logs)

        level_counts: dict[str, int] = {}
        for entry in logs:
            level_counts[entry.level] = level_counts.get(entry.level, 0) + 1

        return {
            "total_captured": len(logs),
            "max_entries": self.max_entries,
            "level_counts": level_counts,
            "oldest_entry": logs[0].timestamp if logs else None,
            "newest_entry": logs[-1].timestamp if logs else None,
        }

    def clear(self) -> None:
        """Clear all captured logs"""
        with self._lock:
            self.logs.clear()


# Global log capture handler instance
_log_capture_handler: LogCaptureHandler | None = None


def setup_log_capture(max_entries: int = 2000) -> LogCaptureHandler:
    """
    Set up log capture on the root logger.
    Call this once during app startup.

    Args:
        max_entries: Maximum log entries to keep in memory

    Returns:
        The LogCaptureHandler instance
    """
    global _log_capture_handler

    if _log_capture_handler is None:
        _log_capture_handler = LogCaptureHandler(max_entries=max_entries)
        _log_capture_handler.setLevel(logging.DEBUG)
        logging.getLogger().addHandler(_log_capture_handler)

    return _log_capture_handler


def get_log_capture() -> LogCaptureHandler | None:
    """Get the global log capture handler"""
    return _log_capture_handler
