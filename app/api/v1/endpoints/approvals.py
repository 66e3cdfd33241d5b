"""Approval API: tenants raise requests; owners and staff decide them."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import (
    get_approval_workflows,
    require_approval_decider,
    require_approval_requester,
)
from app.api.v1.responses import workflow_response
from app.application.use_cases.workflows import ApprovalWorkflows
from app.schemas.approval import (
    ApprovalCreateRequest,
    ApprovalCreateResponse,
    ApprovalDecisionRequest,
    ApprovalDecisionResponse,
    BulkDecisionRequest,
    BulkDecisionResponse,
)
from app.schemas.workflow import WorkflowResultResponse
from app.shared.context import ActorContext

router = APIRouter()


@router.post(
    "",
    status_code=201,
    response_model=WorkflowResultResponse[ApprovalCreateResponse],
)
async def create_approval(
    body: ApprovalCreateRequest,
    actor: Annotated[ActorContext, Depends(require_approval_requester)],
    workflows: Annotated[ApprovalWorkflows, Depends(get_approval_workflows)],
) -> JSONResponse:
    """Raise a request for the owner; the owner is notified."""
    result = await workflows.create_approval(body.to_input(), actor)
    return workflow_response(result, ApprovalCreateResponse, success_status=201)


@router.post(
    "/{approval_id}/decision",
    response_model=WorkflowResultResponse[ApprovalDecisionResponse],
)
async def decide_approval(
    approval_id: str,
    body: ApprovalDecisionRequest,
    actor: Annotated[ActorContext, Depends(require_approval_decider)],
    workflows: Annotated[ApprovalWorkflows, Depends(get_approval_workflows)],
) -> JSONResponse:
    """Approve (and apply) or reject a pending request."""
    result = await workflows.process_approval(body.to_input(approval_id), actor)
    return workflow_response(result, ApprovalDecisionResponse)


@router.post("/bulk-approve", response_model=BulkDecisionResponse)
async def bulk_approve(
    body: BulkDecisionRequest,
    actor: Annotated[ActorContext, Depends(require_approval_decider)],
    workflows: Annotated[ApprovalWorkflows, Depends(get_approval_workflows)],
) -> BulkDecisionResponse:
    output = await workflows.bulk_approve(body.approval_ids, actor, body.decision_notes)
    return BulkDecisionResponse.model_validate(output)


@router.post("/bulk-reject", response_model=BulkDecisionResponse)
async def bulk_reject(
    body: BulkDecisionRequest,
    actor: Annotated[ActorContext, Depends(require_approval_decider)],
    workflows: Annotated[ApprovalWorkflows, Depends(get_approval_workflows)],
) -> BulkDecisionResponse:
    output = await workflows.bulk_reject(body.approval_ids, actor, body.decision_notes)
    return BulkDecisionResponse.model_validate(output)
