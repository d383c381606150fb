"""Infrastructure exceptions for activity log persistence.

Extend ActivityLoggerException so callers can catch one base type.
"""

from activity_logger.domain.exceptions import ActivityLoggerException


class PersistenceException(ActivityLoggerException):
    """Base exception for log store operations."""


class LogPersistError(PersistenceException):
    """A batch of scoped log rows failed to persist; none of it was written."""

    def __init__(self, batch_size: int, reason: str) -> None:
        super().__init__(
            f"Failed to persist activity log batch of {batch_size} row(s)",
            "LOG_PERSIST_ERROR",
            {"batch_size": batch_size, "reason": reason},
        )
