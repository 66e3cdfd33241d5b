"""Workflow result to HTTP response."""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.application.dtos.workflow import WorkflowResult
from app.core.exception_handlers import status_for_error_code
from app.schemas.workflow import WorkflowResultResponse


def workflow_response[T: BaseModel](
    result: WorkflowResult[Any],
    data_model: type[T],
    success_status: int = 200,
) -> JSONResponse:
    """Serialize result; a failed run maps its first error code to the status."""
    body = WorkflowResultResponse[data_model].from_result(result, data_model)
    status = success_status
    if not result.success:
        status = status_for_error_code(result.error.code.value) if result.error else 500
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))
