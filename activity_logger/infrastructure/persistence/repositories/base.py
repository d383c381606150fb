"""Base repository: generic CRUD and lifecycle hooks."""

from typing import Any, Generic, TypeVar

from sqlalchemy import and_, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session

from activity_logger.domain.exceptions import ResourceNotFoundException
from activity_logger.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with get_by_id, get_all, create, update, delete and hooks.

    Hooks run after the repository's own flush succeeded, in the same session
    (and therefore the same transaction) as the write:
    _on_after_create(obj), _on_after_update(obj, changed_fields),
    _on_after_delete(obj).
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """Return a single record by primary key, or None."""
        return await self.db.get(self.model, entity_id)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """Return records with pagination."""
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record and run _on_after_create hook."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_create(obj)
        return obj

    async def update(
        self, obj: ModelType, *, skip_existence_check: bool = False
    ) -> ModelType:
        """Update an existing record (merge if detached) and run _on_after_update hook.

        Raises ValueError if a primary key value is missing and ResourceNotFoundException
        if a detached object has no row. changed_fields passed to the hook are the
        column attributes whose value differs from the loaded one, captured
        before the flush clears attribute history.
        """
        mapper = sa_inspect(self.model)
        pk_attrs = [mapper.get_property_by_column(c).key for c in mapper.primary_key]
        for key in pk_attrs:
            if getattr(obj, key) is None:
                raise ValueError(
                    f"Cannot update: primary key '{key}' is missing on "
                    f"{self.model.__name__} instance."
                )
        attached = object_session(obj) is self.db.sync_session
        if not attached and not skip_existence_check:
            stmt = select(self.model).where(
                and_(*(getattr(self.model, k) == getattr(obj, k) for k in pk_attrs))
            )
            result = await self.db.execute(stmt)
            if result.scalar_one_or_none() is None:
                pk_str = ",".join(str(getattr(obj, k)) for k in pk_attrs)
                raise ResourceNotFoundException(self.model.__name__, pk_str)
            obj = await self.db.merge(obj)
        elif not attached:
            obj = await self.db.merge(obj)
        changed_fields = self._changed_fields(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(obj, changed_fields)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Delete the record, then run _on_after_delete hook with the pre-delete state."""
        await self.db.delete(obj)
        await self.db.flush()
        await self._on_after_delete(obj)

    @staticmethod
    def _changed_fields(obj: ModelType) -> set[str]:
        state = sa_inspect(obj)
        return {
            attr.key
            for attr in state.mapper.column_attrs
            if state.attrs[attr.key].history.has_changes()
        }

    async def _on_after_create(self, obj: ModelType) -> None:
        """Override in subclasses to emit events."""

    async def _on_after_update(self, obj: ModelType, changed_fields: set[str]) -> None:
        """Override in subclasses to emit events."""

    async def _on_after_delete(self, obj: ModelType) -> None:
        """Override in subclasses to emit events."""
