"""Activity log ORM model. One row per (event, scope) pair; append-only."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Connection, DateTime, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from activity_logger.infrastructure.persistence.database import Base
from activity_logger.shared.utils.datetime import utc_now


class ActivityLog(Base):
    """Scoped activity log row. Who did what to which subject, filed under which scope.

    Identifiers are stored as strings so integer and string primary keys of
    different entity types share one table. id is autoincrementing and is the
    ordering key for "most recent first" queries.
    """

    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    issuer_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    issuer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    scope_type: Mapped[str] = mapped_column(String(255), nullable=False)
    scope_id: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    level: Mapped[str] = mapped_column(String(32), nullable=False, default="info")
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_activity_log_scope", "scope_type", "scope_id"),
        Index("ix_activity_log_subject", "subject_type", "subject_id"),
        Index("ix_activity_log_issuer", "issuer_type", "issuer_id"),
    )


@event.listens_for(ActivityLog, "before_update")
def _prevent_activity_log_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: ActivityLog
) -> None:
    """Activity log rows are append-only; updates are forbidden."""
    raise ValueError("Activity log entries are immutable and cannot be updated.")


@event.listens_for(ActivityLog, "before_delete")
def _prevent_activity_log_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: ActivityLog
) -> None:
    """Activity log rows are never deleted through the ORM."""
    raise ValueError("Activity log entries cannot be deleted.")
