"""Tenant API: onboarding and room transfer, each run as a workflow."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_tenant_workflows, require_operator
from app.api.v1.responses import workflow_response
from app.application.use_cases.workflows import TenantWorkflows
from app.schemas.tenant import (
    RoomTransferRequest,
    RoomTransferResponse,
    TenantCreateRequest,
    TenantCreateResponse,
)
from app.schemas.workflow import WorkflowResultResponse
from app.shared.context import ActorContext

router = APIRouter()


@router.post(
    "",
    status_code=201,
    response_model=WorkflowResultResponse[TenantCreateResponse],
)
async def create_tenant(
    body: TenantCreateRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[TenantWorkflows, Depends(get_tenant_workflows)],
) -> JSONResponse:
    """Create a tenant, occupy the room (and bed), optionally bill and welcome them."""
    result = await workflows.create_tenant(body.to_input(), actor)
    return workflow_response(result, TenantCreateResponse, success_status=201)


@router.post(
    "/{tenant_id}/transfer",
    response_model=WorkflowResultResponse[RoomTransferResponse],
)
async def transfer_room(
    tenant_id: str,
    body: RoomTransferRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[TenantWorkflows, Depends(get_tenant_workflows)],
) -> JSONResponse:
    """Move a tenant to another room, releasing the old one."""
    result = await workflows.transfer_room(body.to_input(tenant_id), actor)
    return workflow_response(result, RoomTransferResponse)
