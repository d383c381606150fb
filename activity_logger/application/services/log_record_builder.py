"""Log record assembly: identities, data snapshots and message finalization."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstanceState

from activity_logger.application.dtos.activity_log import LogRecord
from activity_logger.application.services.identity_resolver import (
    EntityRegistry,
    entity_registry,
)
from activity_logger.shared.enums import ActivityAction, LogLevel

# (record, {"object": subject, "issuer": issuer}) -> message
MessageBuilder = Callable[[LogRecord, dict[str, Any]], str]

REDACTED = "[REDACTED]"
SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "hashed_password",
        "secret",
        "api_key",
        "token",
        "credentials",
        "client_secret",
        "refresh_token",
        "access_token",
    }
)


def to_json_safe(value: Any) -> Any:
    """Convert a column value into something the JSON column can store."""
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal | UUID):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, dict):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [to_json_safe(v) for v in value]
    return value


class LogRecordBuilder:
    """Builds canonical LogRecords and the data snapshots attached to them.

    Visible fields are the mapped column attributes of the entity minus the
    model's ``__hidden_fields__`` and the builder's own hidden_fields. Hidden
    fields never appear in data; sensitive-looking visible fields are redacted.
    """

    def __init__(
        self,
        registry: EntityRegistry | None = None,
        hidden_fields: Iterable[str] = (),
    ) -> None:
        self._registry = registry or entity_registry
        self._hidden_fields = frozenset(hidden_fields)

    def build(self, subject: Any = None, issuer: Any = None) -> LogRecord:
        """Return a record with resolved identities, level info and an empty message."""
        issuer_type, issuer_id = self._registry.resolve(issuer)
        subject_type, subject_id = self._registry.resolve(subject)
        return LogRecord(
            issuer_type=issuer_type,
            issuer_id=issuer_id,
            subject_type=subject_type,
            subject_id=subject_id,
            action=ActivityAction.CUSTOM,
            level=LogLevel.INFO.value,
            message="",
        )

    def visible_fields(self, entity: Any) -> list[str] | None:
        """Ordered visible attribute keys of entity, or None when it is not a mapped instance."""
        state = sa_inspect(entity, raiseerr=False) if entity is not None else None
        if not isinstance(state, InstanceState):
            return None
        hidden = self._hidden_fields | frozenset(
            getattr(state.class_, "__hidden_fields__", ())
        )
        return [
            attr.key for attr in state.mapper.column_attrs if attr.key not in hidden
        ]

    def snapshot(self, entity: Any) -> dict[str, Any] | None:
        """Full visible snapshot of entity; None when there is no entity."""
        fields = self.visible_fields(entity)
        if fields is None:
            return None
        return self._extract(entity, fields)

    def changed_snapshot(
        self, entity: Any, changed_fields: Collection[str]
    ) -> dict[str, Any] | None:
        """Visible snapshot restricted to changed_fields."""
        fields = self.visible_fields(entity)
        if fields is None:
            return None
        changed = set(changed_fields)
        return self._extract(entity, [f for f in fields if f in changed])

    @staticmethod
    def _extract(entity: Any, fields: list[str]) -> dict[str, Any]:
        # Loaded state only: expired attributes would trigger IO on an async session.
        loaded = sa_inspect(entity).dict
        data: dict[str, Any] = {}
        for key in fields:
            if key not in loaded:
                continue
            if key.lower() in SENSITIVE_FIELDS:
                data[key] = REDACTED
            else:
                data[key] = to_json_safe(loaded[key])
        return data

    @staticmethod
    def finalize_message(
        record: LogRecord,
        subject: Any = None,
        issuer: Any = None,
        message_builder: MessageBuilder | None = None,
    ) -> str:
        """Message for record: the builder's output when one is set, else record.message.

        Builder exceptions propagate to the caller.
        """
        if message_builder is None:
            return record.message
        return message_builder(record, {"object": subject, "issuer": issuer})
