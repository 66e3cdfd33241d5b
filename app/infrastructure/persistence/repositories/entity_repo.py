"""Entity repository and cascade applier over the workspace entity tables."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.cascade import CascadeEffect
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.interfaces.repositories import IEntityRepository, Row
from app.domain.exceptions import UnknownEntityTypeException
from app.infrastructure.exceptions import describe_db_error
from app.infrastructure.persistence.models import ENTITY_MODELS
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.enums import CascadeAction, EntityType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class EntityRepository:
    """Rows of any mapped entity table as plain dicts; implements IEntityRepository.

    Raises UnknownEntityTypeException for entity types with no table.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._repos: dict[EntityType, BaseRepository[Any]] = {}

    def _repo(self, entity_type: EntityType) -> BaseRepository[Any]:
        repo = self._repos.get(entity_type)
        if repo is None:
            model = ENTITY_MODELS.get(entity_type)
            if model is None:
                raise UnknownEntityTypeException(str(entity_type.value))
            repo = BaseRepository(self.db, model)
            self._repos[entity_type] = repo
        return repo

    async def get(self, entity_type: EntityType, entity_id: str, workspace_id: str) -> Row | None:
        repo = self._repo(entity_type)
        obj = await repo.get_by_id(entity_id, workspace_id)
        return repo.to_row(obj) if obj is not None else None

    async def find(
        self,
        entity_type: EntityType,
        workspace_id: str,
        filters: dict[str, Any] | None = None,
        *,
        limit: int | None = None,
    ) -> list[Row]:
        repo = self._repo(entity_type)
        return [repo.to_row(obj) for obj in await repo.find(workspace_id, filters, limit=limit)]

    async def count(
        self,
        entity_type: EntityType,
        workspace_id: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        return await self._repo(entity_type).count(workspace_id, filters)

    async def insert(self, entity_type: EntityType, workspace_id: str, values: Row) -> Row:
        repo = self._repo(entity_type)
        return repo.to_row(await repo.create(workspace_id, values))

    async def update(
        self, entity_type: EntityType, entity_id: str, workspace_id: str, values: Row
    ) -> Row | None:
        repo = self._repo(entity_type)
        obj = await repo.update(entity_id, workspace_id, values)
        return repo.to_row(obj) if obj is not None else None

    async def delete(self, entity_type: EntityType, entity_id: str, workspace_id: str) -> bool:
        return await self._repo(entity_type).delete(entity_id, workspace_id)


class CascadeApplier:
    """Applies typed cascade effects as direct writes; implements ICascadeApplier.

    create inserts a row with the effect's entity_id; update and status_change
    set the fields; delete removes the row. Database errors come back as a
    failed ServiceResult, never raised.
    """

    def __init__(self, entities: IEntityRepository) -> None:
        self.entities = entities

    async def apply(self, effect: CascadeEffect, workspace_id: str) -> ServiceResult[None]:
        entity_type = effect.entity_type
        values = effect.fields.to_values()
        try:
            if effect.action == CascadeAction.CREATE:
                await self.entities.insert(
                    entity_type, workspace_id, {**values, "id": effect.entity_id}
                )
                return ServiceResult.ok(None)
            if effect.action == CascadeAction.DELETE:
                existed = await self.entities.delete(entity_type, effect.entity_id, workspace_id)
            else:
                existed = await self.entities.update(
                    entity_type, effect.entity_id, workspace_id, values
                ) is not None
        except Exception as e:
            logger.warning(
                "Cascade %s on %s %s failed",
                effect.action.value,
                entity_type.value,
                effect.entity_id,
                exc_info=True,
            )
            return ServiceResult.fail(
                describe_db_error(e, f"{effect.action.value} {entity_type.value}")
            )
        if not existed:
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND,
                f"{entity_type.value} not found",
                details={"entity_id": effect.entity_id},
            )
        return ServiceResult.ok(None)
