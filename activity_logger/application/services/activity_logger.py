"""Activity logger: per-entity-type logging controller.

Ties the pipeline together for one logging-enabled entity type:

    lifecycle event -> identities -> LogRecord -> scope fan-out -> atomic write

Example (comments filed under their article and author as well):

    logger = ActivityLogger(
        Comment,
        ActivityLogRepository(session),
        LoggerConfig(scope=[Comment, Article, Author]),
    )
    logger.set_scope([Comment, article, author]).set_issuer(current_user)
    await logger.on_after_save(comment, is_new=False, changed_fields={"body"})

State (scope, issuer, message builder) belongs to the caller for one unit of
work, typically one request/session; it is not synchronized.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import Any, Self

from activity_logger.application.dtos.activity_log import (
    ActivityLogResult,
    LogRecord,
    ScopedLogRecord,
)
from activity_logger.application.interfaces.repositories import IActivityLogRepository
from activity_logger.application.services.identity_resolver import (
    EntityRegistry,
    entity_registry,
)
from activity_logger.application.services.log_record_builder import (
    LogRecordBuilder,
    MessageBuilder,
    to_json_safe,
)
from activity_logger.application.services.scope_fanout import ScopeFanout
from activity_logger.application.services.scope_registry import ScopeRegistry, ScopeSet
from activity_logger.domain.exceptions import ValidationException
from activity_logger.shared.enums import ActivityAction, LogLevel
from activity_logger.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LoggerConfig:
    """Setup-time logging configuration of one entity type.

    Attributes:
        log_model: ORM class receiving the log rows (None = ActivityLog).
            Read by LoggableRepository when it builds the log repository;
            an ActivityLogger given its own repository only checks that
            the two agree.
        scope: Declared scope: type names, model classes and/or entities.
            Empty means "the entity type itself".
        issuer: Initial issuer (actor) entity.
        message_builder: Callable(record, {"object", "issuer"}) -> message.
        hidden_fields: Attribute keys never written into data, on top of
            each model's own __hidden_fields__.
    """

    log_model: type | None = None
    scope: Any = None
    issuer: Any = None
    message_builder: MessageBuilder | None = None
    hidden_fields: Iterable[str] = field(default_factory=frozenset)


def _coerce_level(level: LogLevel | str) -> str:
    try:
        return LogLevel(level).value
    except ValueError:
        raise ValidationException(f"Unknown log level: {level!r}", field="level") from None


def _coerce_action(action: ActivityAction | str | None) -> ActivityAction:
    if action is None:
        return ActivityAction.CUSTOM
    try:
        return ActivityAction(action)
    except ValueError:
        raise ValidationException(f"Unknown action: {action!r}", field="action") from None


class ActivityLogger:
    """Logging controller for one entity type."""

    def __init__(
        self,
        model: type,
        log_repository: IActivityLogRepository,
        config: LoggerConfig | None = None,
        *,
        registry: EntityRegistry | None = None,
        type_name: str | None = None,
    ) -> None:
        self._registry = registry or entity_registry
        if type_name is not None:
            self._registry.register(model, type_name)
        self._type_name = self._registry.type_name_for(model) or model.__name__
        self._config = config or LoggerConfig()
        self._log_repository = log_repository
        log_model = self._config.log_model
        repository_model = getattr(log_repository, "model", None)
        if log_model is not None and repository_model is not log_model:
            logger.warning(
                "LoggerConfig.log_model %s ignored: %s logs are written to %s",
                log_model.__name__,
                self._type_name,
                getattr(repository_model, "__name__", repr(repository_model)),
            )
        self._scope = ScopeRegistry(self._type_name, self._config.scope, self._registry)
        self._builder = LogRecordBuilder(self._registry, self._config.hidden_fields)
        self._fanout = ScopeFanout(self._type_name)
        self._message_builder = self._config.message_builder
        self._issuer: Any = None
        if self._config.issuer is not None:
            self.set_issuer(self._config.issuer)

    @property
    def type_name(self) -> str:
        """Registered type name of the entity type this logger serves."""
        return self._type_name

    @property
    def config(self) -> LoggerConfig:
        return self._config

    # Runtime configuration

    def get_scope(self) -> ScopeSet:
        return self._scope.get()

    def set_scope(self, scope: Any) -> Self:
        """Replace the current scope (type names, model classes and/or entities)."""
        self._scope.set(scope)
        return self

    def reset_scope(self) -> Self:
        """Restore the scope declared at setup."""
        self._scope.reset()
        return self

    def get_issuer(self) -> Any:
        return self._issuer

    def set_issuer(self, issuer: Any) -> Self:
        """Set the actor; its id is bound into the scope when its type is a scope key.

        The id is bound even when it is None (unsaved issuer), and clearing
        the issuer unbinds the previous issuer's type, so rows are never filed
        under a former actor.
        """
        previous_type = self._registry.resolve(self._issuer).type_name
        issuer_type, issuer_id = self._registry.resolve(issuer)
        if previous_type is not None and previous_type != issuer_type:
            self._scope.bind(previous_type, None)
        self._scope.bind(issuer_type, issuer_id)
        self._issuer = issuer
        return self

    def get_message_builder(self) -> MessageBuilder | None:
        return self._message_builder

    def set_message_builder(self, message_builder: MessageBuilder | None) -> Self:
        self._message_builder = message_builder
        return self

    # Lifecycle hooks

    async def on_after_save(
        self, entity: Any, is_new: bool, changed_fields: Collection[str] = ()
    ) -> list[ScopedLogRecord]:
        """Log a create (is_new) or an update of the changed visible fields."""
        record = self._builder.build(entity, self._issuer)
        if is_new:
            record.action = ActivityAction.CREATE
            record.data = self._builder.snapshot(entity)
        else:
            record.action = ActivityAction.UPDATE
            record.data = self._builder.changed_snapshot(entity, changed_fields)
        return await self._dispatch(record, self._scope.get(), entity, self._issuer)

    async def on_after_delete(self, entity: Any) -> list[ScopedLogRecord]:
        """Log a delete with the full pre-delete snapshot."""
        record = self._builder.build(entity, self._issuer)
        record.action = ActivityAction.DELETE
        record.data = self._builder.snapshot(entity)
        return await self._dispatch(record, self._scope.get(), entity, self._issuer)

    # Custom entry point

    async def log(
        self,
        level: LogLevel | str,
        message: str,
        *,
        subject: Any = None,
        issuer: Any = None,
        scope: Any = None,
        action: ActivityAction | str | None = None,
        data: dict[str, Any] | None = None,
    ) -> list[ScopedLogRecord]:
        """Write a custom log entry and return the rows that were persisted.

        Args:
            level: LogLevel or its value.
            message: Literal message (replaced by the message builder, if set).
            subject: Entity the entry is about (default: none).
            issuer: Actor (default: the configured issuer).
            scope: Scope for this call only (default: the configured scope).
            action: Action tag (default: CUSTOM).
            data: Payload (default: full visible snapshot of subject).

        Raises:
            ValidationException: Unknown level or action.
            LogPersistError: The batch could not be written.
        """
        level_value = _coerce_level(level)
        record_action = _coerce_action(action)
        issuer = issuer if issuer is not None else self._issuer
        scope_set = self._scope.normalize(scope) if scope else self._scope.get()

        record = self._builder.build(subject, issuer)
        record.action = record_action
        record.data = to_json_safe(data) if data is not None else self._builder.snapshot(subject)
        record.level = level_value
        record.message = message

        if record.issuer_id is not None and record.issuer_type in self._scope.get():
            scope_set[record.issuer_type] = record.issuer_id

        return await self._dispatch(record, scope_set, subject, issuer)

    # Queries

    async def find_activity(
        self, subject: Any = None, *, skip: int = 0, limit: int = 100
    ) -> list[ActivityLogResult]:
        """Rows filed under this entity type, or under subject when one is given; newest first."""
        if subject is None:
            return await self._log_repository.find_by_scope(
                self._type_name, skip=skip, limit=limit
            )
        type_name, entity_id = self._registry.resolve(subject)
        if type_name is None:
            return await self._log_repository.find_by_scope(
                self._type_name, skip=skip, limit=limit
            )
        if entity_id is None:
            return []
        return await self._log_repository.find_by_scope(
            type_name, entity_id, skip=skip, limit=limit
        )

    async def _dispatch(
        self,
        record: LogRecord,
        scope: ScopeSet,
        subject: Any,
        issuer: Any,
    ) -> list[ScopedLogRecord]:
        record.message = self._builder.finalize_message(
            record, subject, issuer, self._message_builder
        )
        rows = self._fanout.expand(scope, record, subject)
        if rows:
            await self._log_repository.save_atomic(rows)
            logger.debug(
                "Logged %s %s to %d scope(s)",
                self._type_name,
                record.action.value,
                len(rows),
            )
        return rows
