"""Scoped activity logging for SQLAlchemy entities.

One logical change event is written once per scope entity, so the same event
can be listed under the changed entity and under any related entity.
"""

from activity_logger.application.services import (
    ActivityLogger,
    ByObject,
    ByType,
    EntityRegistry,
    LoggerConfig,
    entity_registry,
)
from activity_logger.infrastructure.exceptions import LogPersistError
from activity_logger.infrastructure.persistence.models import ActivityLog
from activity_logger.infrastructure.persistence.repositories import (
    ActivityLogRepository,
    LoggableRepository,
)
from activity_logger.shared.enums import ActivityAction, LogLevel

__version__ = "1.0.0"

__all__ = [
    "ActivityAction",
    "ActivityLog",
    "ActivityLogRepository",
    "ActivityLogger",
    "ByObject",
    "ByType",
    "EntityRegistry",
    "LogLevel",
    "LogPersistError",
    "LoggableRepository",
    "LoggerConfig",
    "entity_registry",
]
