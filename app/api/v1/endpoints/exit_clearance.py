"""Exit clearance API: initiate (notice + settlement) and complete (check-out)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_exit_workflows, require_operator
from app.api.v1.responses import workflow_response
from app.application.use_cases.workflows import ExitWorkflows
from app.schemas.exit_clearance import (
    ExitCompleteRequest,
    ExitCompleteResponse,
    ExitInitiateRequest,
    ExitInitiateResponse,
)
from app.schemas.workflow import WorkflowResultResponse
from app.shared.context import ActorContext

router = APIRouter()


@router.post(
    "",
    status_code=201,
    response_model=WorkflowResultResponse[ExitInitiateResponse],
)
async def initiate_exit(
    body: ExitInitiateRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[ExitWorkflows, Depends(get_exit_workflows)],
) -> JSONResponse:
    result = await workflows.initiate_exit(body.to_input(), actor)
    return workflow_response(result, ExitInitiateResponse, success_status=201)


@router.post(
    "/{clearance_id}/complete",
    response_model=WorkflowResultResponse[ExitCompleteResponse],
)
async def complete_exit(
    clearance_id: str,
    body: ExitCompleteRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[ExitWorkflows, Depends(get_exit_workflows)],
) -> JSONResponse:
    result = await workflows.complete_exit(body.to_input(clearance_id), actor)
    return workflow_response(result, ExitCompleteResponse)
