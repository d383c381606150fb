"""Scope fan-out: one canonical record -> one row per resolved scope entry.

Only None and "" count as unresolved scope ids. 0 and "0" are
valid ids and are kept on purpose.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from activity_logger.application.dtos.activity_log import (
    Identifier,
    LogRecord,
    ScopedLogRecord,
)
from activity_logger.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _is_unresolved(scope_id: Identifier | None) -> bool:
    return scope_id is None or scope_id == ""


class ScopeFanout:
    """Expands a LogRecord over a scope set for the entity type self_type."""

    def __init__(self, self_type: str) -> None:
        self.self_type = self_type

    def expand(
        self,
        scope: Mapping[str, Identifier | None],
        record: LogRecord,
        subject: Any = None,
    ) -> list[ScopedLogRecord]:
        """Return one ScopedLogRecord per scope entry, in scope order.

        The self_type entry always takes the subject's id when the subject is
        itself a self_type entity, overriding whatever id was configured.
        Entries whose id is still unresolved produce no row; an empty result
        is not an error.
        """
        rows: list[ScopedLogRecord] = []
        for scope_type, scope_id in scope.items():
            if (
                subject is not None
                and scope_type == self.self_type
                and record.subject_type == self.self_type
            ):
                scope_id = record.subject_id
            if _is_unresolved(scope_id):
                continue
            rows.append(record.scoped(scope_type, scope_id))
        if not rows:
            logger.debug(
                "No resolved scope for %s %s event; nothing to persist",
                self.self_type,
                record.action.value,
            )
        return rows
