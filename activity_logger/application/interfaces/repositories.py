"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from activity_logger.application.dtos.activity_log import (
        ActivityLogResult,
        Identifier,
        ScopedLogRecord,
    )


class IActivityLogRepository(Protocol):
    """Protocol for the activity log store (DIP)."""

    async def save_atomic(
        self, rows: Sequence[ScopedLogRecord]
    ) -> list[ActivityLogResult]:
        """Persist all rows or none (savepoint-scoped). Raises LogPersistError on failure."""

    async def find_by_scope(
        self,
        scope_type: str,
        scope_id: Identifier | None = None,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ActivityLogResult]:
        """Return rows filed under scope_type (and scope_id when given), newest first."""
