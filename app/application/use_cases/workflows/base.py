"""Shared plumbing for workflow sets: running definitions and reading rows."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.dtos.workflow import WorkflowContext, WorkflowOptions, WorkflowResult
from app.application.interfaces.repositories import IEntityRepository, Row
from app.application.interfaces.services import IWorkflowEngine
from app.domain.entities.workflow import WorkflowDefinition
from app.shared.context import ActorContext
from app.shared.enums import EntityType
from app.shared.telemetry.logging import get_logger

ZERO = Decimal("0")


def money(value: Any) -> Decimal:
    """Coerce a stored amount (Decimal, int, float, str or None) to Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def actor_of(context: WorkflowContext) -> ActorContext:
    """Actor snapshot for audit events built inside a workflow."""
    return ActorContext(
        actor_id=context.actor_id,
        actor_type=context.actor_type,
        workspace_id=context.workspace_id,
        ip_address=context.metadata.get("ip_address"),
        user_agent=context.metadata.get("user_agent"),
    )


class WorkflowSet:
    """Base for a group of related workflow definitions over the entity store."""

    def __init__(
        self,
        engine: IWorkflowEngine,
        entities: IEntityRepository,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.engine = engine
        self.entities = entities
        self._logger = logger or get_logger(__name__)

    async def run[TInput, TOutput](
        self,
        definition: WorkflowDefinition[TInput, TOutput],
        input: TInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[TOutput]:
        """Execute definition for actor; request ip/user agent travel in metadata."""
        options = options or WorkflowOptions()
        extra = {
            k: v
            for k, v in (("ip_address", actor.ip_address), ("user_agent", actor.user_agent))
            if v
        }
        if extra:
            options = WorkflowOptions(
                skip_audit=options.skip_audit,
                skip_notifications=options.skip_notifications,
                metadata={**extra, **options.metadata},
            )
        return await self.engine.execute_workflow(
            definition, input, actor.actor_id, actor.actor_type, actor.workspace_id, options
        )

    async def require(
        self,
        entity_type: EntityType,
        entity_id: str | None,
        workspace_id: str,
        message: str,
    ) -> ServiceResult[Row]:
        """Return the row, or a NOT_FOUND failure carrying message."""
        row = None
        if entity_id:
            row = await self.entities.get(entity_type, entity_id, workspace_id)
        if row is None:
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND, message, details={"entity_id": entity_id}
            )
        return ServiceResult.ok(row)
