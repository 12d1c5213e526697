"""
Logs API Router

Provides endpoints to access backend logs from the UI.
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel

from tosbur.api.services.log_capture import get_log_capture

router = APIRouter(prefix="/api/logs", tags=["logs"])


class LogEntry(BaseModel):
    """Log entry response model"""

    timestamp: str
    level: str
    logger: str
    message: str
    container_id: str | None = None


class LogsResponse(BaseModel):
    """Response containing log entries"""

    logs: list[LogEntry]
    total: int
    filtered: int


class LogStatsResponse(BaseModel):
    """Log statistics response"""

    total_captured: int
    max_entries: int
    level_counts: dict[str, int]
    oldest_entry: str | None
    newest_entry: str | None


@router.get("", response_model=LogsResponse)
async def get_logs(
    limit: int = Query(default=100, ge=1, le=1000, description="Maximum number of logs to return"),
    level: str | None = Query(default=None, description="Filter by log level"),
    logger_filter: str | None = Query(default=None, description="Filter by logger name (substring match)"),
    container_id: str | None = Query(default=None, description="Filter by container id"),
):
    """
    Get recent backend logs with optional filtering.

    Logs are returned in reverse chronological order (newest first).
    """
    capture = get_log_capture()

    if not capture:
        return LogsResponse(logs=[], total=0, filtered=0)

    logs = capture.get_logs(
        limit=limit,
        level=level,
        logger_filter=logger_filter,
        container_id=container_id,
    )

    return LogsResponse(
        logs=[LogEntry(**entry) for entry in logs],
        total=len(capture.logs),
        filtered=len(logs),
    )


@router.get("/stats", response_model=LogStatsResponse)
async def get_log_stats():
    """Get log capture statistics"""
    capture = get_log_capture()

    if not capture:
        return LogStatsResponse(
            total_captured=0,
            max_entries=0,
            level_counts={},
            oldest_entry=None,
            newest_entry=None,
        )

    return LogStatsResponse(**capture.get_stats())


@router.delete("")
async def clear_logs():
    """Clear captured logs"""
    capture = get_log_capture()
    if capture:
        capture.clear()
    return {"success": True}
