"""Base repository: workspace-scoped CRUD over one ORM model."""

from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import ValidationException
from app.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with get, find, count, create, update and delete.

    Every query is restricted to one workspace_id, on top of the row-level
    security the session sets. Filter and value keys must be mapped columns.
    Each write runs in a SAVEPOINT, so a failed write leaves the enclosing
    transaction usable.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model
        self._columns = {attr.key for attr in sa_inspect(model).column_attrs}

    def _column(self, name: str) -> Any:
        if name not in self._columns:
            raise ValidationException(
                f"{self.model.__name__} has no column '{name}'", field=name
            )
        return getattr(self.model, name)

    def _conditions(self, workspace_id: str, filters: dict[str, Any] | None) -> list[Any]:
        conditions = [self._column("workspace_id") == workspace_id]
        for key, value in (filters or {}).items():
            column = self._column(key)
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions

    async def get_by_id(self, entity_id: str, workspace_id: str) -> ModelType | None:
        """Return a single record by primary key within workspace, or None."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(
                and_(model.id == entity_id, model.workspace_id == workspace_id)
            )
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        workspace_id: str,
        filters: dict[str, Any] | None = None,
        *,
        limit: int | None = None,
    ) -> list[ModelType]:
        """Return records matching filters, oldest first."""
        model: Any = self.model
        stmt = (
            select(self.model)
            .where(and_(*self._conditions(workspace_id, filters)))
            .order_by(model.created_at.asc(), model.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, workspace_id: str, filters: dict[str, Any] | None = None) -> int:
        """Return number of records matching filters."""
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(and_(*self._conditions(workspace_id, filters)))
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def create(self, workspace_id: str, values: dict[str, Any]) -> ModelType:
        """Persist a new record in workspace."""
        for key in values:
            self._column(key)
        obj = self.model(**{**values, "workspace_id": workspace_id})
        async with self.db.begin_nested():
            self.db.add(obj)
        await self.db.refresh(obj)
        return obj

    async def update(
        self, entity_id: str, workspace_id: str, values: dict[str, Any]
    ) -> ModelType | None:
        """Set columns on an existing record; return None when it does not exist."""
        obj = await self.get_by_id(entity_id, workspace_id)
        if obj is None:
            return None
        for key in values:
            self._column(key)
        async with self.db.begin_nested():
            for key, value in values.items():
                if key not in ("id", "workspace_id"):
                    setattr(obj, key, value)
        await self.db.refresh(obj)
        return obj

    async def delete(self, entity_id: str, workspace_id: str) -> bool:
        """Delete the record; return whether it existed."""
        obj = await self.get_by_id(entity_id, workspace_id)
        if obj is None:
            return False
        async with self.db.begin_nested():
            await self.db.delete(obj)
        return True

    def to_row(self, obj: ModelType) -> dict[str, Any]:
        """Return the record's columns as a plain dict."""
        return {key: getattr(obj, key) for key in self._columns}
