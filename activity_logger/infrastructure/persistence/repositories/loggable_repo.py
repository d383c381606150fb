"""Loggable repository: activity log entries on create/update/delete.

Extends BaseRepository; lifecycle hooks are forwarded to an ActivityLogger.
Unlike fire-and-forget audit hooks, persistence failures of the log batch
propagate (LogPersistError) to the caller of create/update/delete. The
entity write itself is not rolled back here; wrap the unit of work in
get_db_transactional (or session.begin()) when both must succeed together.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from activity_logger.application.services.activity_logger import (
    ActivityLogger,
    LoggerConfig,
)
from activity_logger.infrastructure.persistence.database import Base
from activity_logger.infrastructure.persistence.repositories.activity_log_repo import (
    ActivityLogRepository,
)
from activity_logger.infrastructure.persistence.repositories.base import BaseRepository
from activity_logger.shared.enums import ActivityAction

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from activity_logger.application.dtos.activity_log import (
        ActivityLogResult,
        ScopedLogRecord,
    )

ModelType = TypeVar("ModelType", bound=Base)


class LoggableRepository(BaseRepository[ModelType]):
    """Repository that writes scoped activity log rows on create/update/delete.

    Either pass a ready ActivityLogger or a LoggerConfig from which one is
    built on this repository's session.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        logger_config: LoggerConfig | None = None,
        *,
        activity_logger: ActivityLogger | None = None,
        type_name: str | None = None,
        enable_logging: bool = True,
    ) -> None:
        super().__init__(db, model)
        if activity_logger is None:
            config = logger_config or LoggerConfig()
            activity_logger = ActivityLogger(
                model,
                ActivityLogRepository(db, config.log_model),
                config,
                type_name=type_name,
            )
        self._activity_logger = activity_logger
        self._logging_enabled = enable_logging

    @property
    def activity_logger(self) -> ActivityLogger:
        """Logger for this entity type (scope, issuer and message builder live here)."""
        return self._activity_logger

    def enable_logging(self) -> None:
        self._logging_enabled = True

    def disable_logging(self) -> None:
        self._logging_enabled = False

    def _should_log(self, action: ActivityAction, obj: ModelType) -> bool:
        """Override to skip logging for certain operations."""
        return True

    def _is_logging(self, action: ActivityAction, obj: ModelType) -> bool:
        return self._logging_enabled and self._should_log(action, obj)

    async def _on_after_create(self, obj: ModelType) -> None:
        await super()._on_after_create(obj)
        if self._is_logging(ActivityAction.CREATE, obj):
            await self._activity_logger.on_after_save(obj, is_new=True)

    async def _on_after_update(self, obj: ModelType, changed_fields: set[str]) -> None:
        await super()._on_after_update(obj, changed_fields)
        if self._is_logging(ActivityAction.UPDATE, obj):
            await self._activity_logger.on_after_save(
                obj, is_new=False, changed_fields=changed_fields
            )

    async def _on_after_delete(self, obj: ModelType) -> None:
        await super()._on_after_delete(obj)
        if self._is_logging(ActivityAction.DELETE, obj):
            await self._activity_logger.on_after_delete(obj)

    async def log(self, level: str, message: str, **context: Any) -> list[ScopedLogRecord]:
        """Write a custom entry through the activity logger (see ActivityLogger.log)."""
        return await self._activity_logger.log(level, message, **context)

    async def find_activity(
        self, subject: Any = None, *, skip: int = 0, limit: int = 100
    ) -> list[ActivityLogResult]:
        """Activity of this entity type, or of subject; newest first."""
        return await self._activity_logger.find_activity(subject, skip=skip, limit=limit)
