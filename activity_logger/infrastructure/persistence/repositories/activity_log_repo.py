"""Activity log repository. Append-only; implements IActivityLogRepository."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from activity_logger.application.dtos.activity_log import (
    ActivityLogResult,
    Identifier,
    ScopedLogRecord,
)
from activity_logger.infrastructure.exceptions import LogPersistError
from activity_logger.infrastructure.persistence.models.activity_log import ActivityLog
from activity_logger.shared.telemetry.logging import get_logger
from activity_logger.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)


def format_identifier(value: Identifier | None) -> str | None:
    """Column representation of an entity id; composite keys are comma-joined."""
    if value is None:
        return None
    if isinstance(value, tuple):
        return ",".join(str(part) for part in value)
    return str(value)


def _orm_to_result(row: ActivityLog) -> ActivityLogResult:
    """Map ORM to application DTO."""
    return ActivityLogResult(
        id=row.id,
        issuer_type=row.issuer_type,
        issuer_id=row.issuer_id,
        subject_type=row.subject_type,
        subject_id=row.subject_id,
        scope_type=row.scope_type,
        scope_id=row.scope_id,
        action=row.action,
        level=row.level,
        message=row.message,
        data=row.data,
        created_at=ensure_utc(row.created_at),
    )


class ActivityLogRepository:
    """Append-only store for scoped activity log rows.

    log_model selects the table (any ORM class with ActivityLog's columns);
    it defaults to ActivityLog.
    """

    def __init__(
        self, db: AsyncSession, log_model: type[ActivityLog] | None = None
    ) -> None:
        self.db = db
        self.model = log_model or ActivityLog

    def _to_orm(self, row: ScopedLogRecord) -> ActivityLog:
        return self.model(
            issuer_type=row.issuer_type,
            issuer_id=format_identifier(row.issuer_id),
            subject_type=row.subject_type,
            subject_id=format_identifier(row.subject_id),
            scope_type=row.scope_type,
            scope_id=format_identifier(row.scope_id),
            action=getattr(row.action, "value", row.action),
            level=row.level,
            message=row.message,
            data=row.data,
        )

    async def save_atomic(
        self, rows: Sequence[ScopedLogRecord]
    ) -> list[ActivityLogResult]:
        """Insert every row inside one SAVEPOINT; all rows land or none do.

        Composes with a transaction the caller already opened: only the
        savepoint is rolled back on failure.

        Raises:
            LogPersistError: Any row failed; the whole batch was rolled back.
            SQLAlchemyError: Flushing the caller's pending objects failed
                (raised unchanged, before any log row is written).
        """
        if not rows:
            return []
        entities = [self._to_orm(row) for row in rows]
        # Caller's pending objects flush outside the savepoint.
        await self.db.flush()
        try:
            async with self.db.begin_nested():
                self.db.add_all(entities)
                await self.db.flush()
        except SQLAlchemyError as e:
            logger.warning(
                "Activity log batch of %d row(s) rolled back: %s",
                len(entities),
                str(e),
                exc_info=True,
            )
            raise LogPersistError(len(entities), str(e)) from e
        return [_orm_to_result(entity) for entity in entities]

    async def find_by_scope(
        self,
        scope_type: str,
        scope_id: Identifier | None = None,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ActivityLogResult]:
        """Rows filed under scope_type (and scope_id when given), newest first."""
        conditions = [self.model.scope_type == scope_type]
        if scope_id is not None:
            conditions.append(self.model.scope_id == format_identifier(scope_id))
        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]
