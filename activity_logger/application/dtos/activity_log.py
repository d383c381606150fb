"""DTOs for activity logging: canonical record, scoped copies, read-model."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from activity_logger.shared.enums import ActivityAction, LogLevel

# Primary key value of a domain entity; composite keys resolve to a tuple.
Identifier = int | str | tuple[Any, ...]


@dataclass
class LogRecord:
    """Canonical log record for one logical event, before scope fan-out.

    Mutable while the event is being assembled (action, data and message are
    filled in per event kind); fanned-out copies are frozen.
    """

    issuer_type: str | None = None
    issuer_id: Identifier | None = None
    subject_type: str | None = None
    subject_id: Identifier | None = None
    action: ActivityAction = ActivityAction.CUSTOM
    level: str = LogLevel.INFO.value
    message: str = ""
    data: dict[str, Any] | None = None

    def scoped(self, scope_type: str, scope_id: Identifier) -> ScopedLogRecord:
        """Return a persistable copy of this record filed under one scope."""
        return ScopedLogRecord(**asdict(self), scope_type=scope_type, scope_id=scope_id)


@dataclass(frozen=True)
class ScopedLogRecord:
    """One persistable row: the canonical record plus its scope. scope_id is never empty."""

    issuer_type: str | None
    issuer_id: Identifier | None
    subject_type: str | None
    subject_id: Identifier | None
    action: ActivityAction
    level: str
    message: str
    data: dict[str, Any] | None
    scope_type: str
    scope_id: Identifier


@dataclass(frozen=True)
class ActivityLogResult:
    """Single persisted activity log row (read-model for the finder)."""

    id: int
    issuer_type: str | None
    issuer_id: str | None
    subject_type: str | None
    subject_id: str | None
    scope_type: str
    scope_id: str
    action: str
    level: str
    message: str
    data: dict[str, Any] | None
    created_at: datetime
