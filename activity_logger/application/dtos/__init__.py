"""Application DTOs."""

from activity_logger.application.dtos.activity_log import (
    ActivityLogResult,
    Identifier,
    LogRecord,
    ScopedLogRecord,
)

__all__ = [
    "ActivityLogResult",
    "Identifier",
    "LogRecord",
    "ScopedLogRecord",
]
