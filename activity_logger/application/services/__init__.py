"""Application services: the activity logging pipeline."""

from activity_logger.application.services.activity_logger import (
    ActivityLogger,
    LoggerConfig,
)
from activity_logger.application.services.identity_resolver import (
    EntityIdentity,
    EntityRegistry,
    entity_registry,
    resolve_identity,
)
from activity_logger.application.services.log_record_builder import (
    LogRecordBuilder,
    MessageBuilder,
)
from activity_logger.application.services.scope_fanout import ScopeFanout
from activity_logger.application.services.scope_registry import (
    ByObject,
    ByType,
    ScopeMember,
    ScopeRegistry,
    ScopeSet,
    normalize_scope,
)

__all__ = [
    "ActivityLogger",
    "LoggerConfig",
    "EntityIdentity",
    "EntityRegistry",
    "entity_registry",
    "resolve_identity",
    "LogRecordBuilder",
    "MessageBuilder",
    "ScopeFanout",
    "ByObject",
    "ByType",
    "ScopeMember",
    "ScopeRegistry",
    "ScopeSet",
    "normalize_scope",
]
