"""Scope configuration: which entities an event is filed under.

A scope set is an insertion-ordered mapping type_name -> id, where a None id
is "unbound" (resolved at fan-out time, or dropped). Callers describe scope
members loosely (type-name strings, model classes, live entities); everything
is normalized through the ByType / ByObject members below.

ScopeRegistry instances are owned by one ActivityLogger for one unit of work
and are not synchronized; do not mutate one from several threads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from activity_logger.application.dtos.activity_log import Identifier
from activity_logger.application.services.identity_resolver import (
    EntityRegistry,
    entity_registry,
)
from activity_logger.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

ScopeSet = dict[str, Identifier | None]


@dataclass(frozen=True)
class ByType:
    """Scope member naming an entity type; its id is unbound."""

    name: str


@dataclass(frozen=True)
class ByObject:
    """Scope member referencing a live entity; resolves to its (type, id)."""

    ref: Any


ScopeMember = ByType | ByObject


def to_scope_member(value: Any, registry: EntityRegistry | None = None) -> ScopeMember:
    """Classify one loose scope value as ByType or ByObject."""
    registry = registry or entity_registry
    if isinstance(value, ByType | ByObject):
        return value
    if isinstance(value, str):
        return ByType(value)
    if registry.is_entity_class(value):
        return ByType(registry.type_name_for(value))
    return ByObject(value)


def normalize_scope(value: Any, registry: EntityRegistry | None = None) -> ScopeSet:
    """Normalize scope input into a canonical ScopeSet.

    Accepts None, a single member or a list/tuple of members. A Mapping is
    taken as an already-normalized scope set and copied, which makes
    normalize_scope(normalize_scope(x)) == normalize_scope(x). Later members
    of the same type overwrite earlier ones. Objects that do not resolve to
    a type are skipped.
    """
    registry = registry or entity_registry
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    values = value if isinstance(value, list | tuple) else [value]
    scope: ScopeSet = {}
    for raw in values:
        member = to_scope_member(raw, registry)
        if isinstance(member, ByType):
            scope[member.name] = None
            continue
        type_name, entity_id = registry.resolve(member.ref)
        if type_name is None:
            logger.debug("Ignoring unresolvable scope member %r", member.ref)
            continue
        scope[type_name] = entity_id
    return scope


class ScopeRegistry:
    """Current and original scope of one logging-enabled entity type."""

    def __init__(
        self,
        self_type: str,
        declared: Any = None,
        registry: EntityRegistry | None = None,
    ) -> None:
        self._registry = registry or entity_registry
        self._self_type = self_type
        scope = normalize_scope(declared, self._registry)
        if not scope:
            scope = {self_type: None}
        self._original: ScopeSet = scope
        self._current: ScopeSet = dict(scope)

    @property
    def self_type(self) -> str:
        return self._self_type

    @property
    def original(self) -> ScopeSet:
        """Scope captured at initialization (copy)."""
        return dict(self._original)

    def normalize(self, value: Any) -> ScopeSet:
        return normalize_scope(value, self._registry)

    def get(self) -> ScopeSet:
        """Return a copy of the current scope."""
        return dict(self._current)

    def set(self, value: Any) -> None:
        """Replace the current scope with the normalized value."""
        self._current = self.normalize(value)

    def reset(self) -> None:
        """Restore the scope configured at initialization."""
        self._current = dict(self._original)

    def bind(self, type_name: str | None, entity_id: Identifier | None) -> bool:
        """Set the id of an existing scope key. Returns False when type_name is not in scope."""
        if type_name is None or type_name not in self._current:
            return False
        self._current[type_name] = entity_id
        return True
