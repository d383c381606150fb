"""Identity resolution: domain object -> (type_name, id).

Type names come from an EntityRegistry (explicit alias, else the mapped class
name); ids are the primary key values SQLAlchemy tracks for the instance.
Resolution is best-effort: anything that is not a mapped instance resolves to
(None, None) instead of raising.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstanceState, Mapper

from activity_logger.application.dtos.activity_log import Identifier


class EntityIdentity(NamedTuple):
    """Stable (type_name, id) pair of a domain object."""

    type_name: str | None
    id: Identifier | None


UNRESOLVED = EntityIdentity(None, None)


class EntityRegistry:
    """Maps mapped model classes to the type names written into log rows."""

    def __init__(self) -> None:
        self._type_names: dict[type, str] = {}

    def register(self, model: type, type_name: str | None = None) -> str:
        """Register model under type_name (default: class name) and return the name."""
        name = type_name or model.__name__
        self._type_names[model] = name
        return name

    def type_name_for(self, model: type) -> str | None:
        """Registered name of model or its nearest registered base; None if unmapped."""
        for cls in model.__mro__:
            if cls in self._type_names:
                return self._type_names[cls]
        mapper = sa_inspect(model, raiseerr=False)
        if not isinstance(mapper, Mapper):
            return None
        return mapper.class_.__name__

    def is_entity_class(self, value: Any) -> bool:
        return isinstance(value, type) and self.type_name_for(value) is not None

    def resolve(self, obj: Any) -> EntityIdentity:
        """Resolve obj to (type_name, id); (None, None) when obj is absent or not an entity.

        The id is None for transient instances whose key is not assigned yet.
        Only loaded state is read, so no lazy load is triggered.
        """
        if obj is None:
            return UNRESOLVED
        state = sa_inspect(obj, raiseerr=False)
        if not isinstance(state, InstanceState):
            return UNRESOLVED
        type_name = self.type_name_for(state.class_)
        if type_name is None:
            return UNRESOLVED
        key = state.identity
        if key is None:
            mapper = state.mapper
            key = tuple(
                state.dict.get(mapper.get_property_by_column(col).key)
                for col in mapper.primary_key
            )
        if not key or any(part is None for part in key):
            return EntityIdentity(type_name, None)
        return EntityIdentity(type_name, key[0] if len(key) == 1 else tuple(key))


entity_registry = EntityRegistry()


def resolve_identity(obj: Any, registry: EntityRegistry | None = None) -> EntityIdentity:
    """Resolve obj against registry (default: the process-wide entity_registry)."""
    return (registry or entity_registry).resolve(obj)
