"""Persistence repositories. Re-exports for dependency injection."""

from activity_logger.infrastructure.persistence.repositories.activity_log_repo import (
    ActivityLogRepository,
)
from activity_logger.infrastructure.persistence.repositories.base import BaseRepository
from activity_logger.infrastructure.persistence.repositories.loggable_repo import (
    LoggableRepository,
)

__all__ = [
    "ActivityLogRepository",
    "BaseRepository",
    "LoggableRepository",
]
