"""Payment API: record, bulk record and refund."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.v1.dependencies import get_payment_workflows, require_operator
from app.api.v1.responses import workflow_response
from app.application.use_cases.workflows import PaymentWorkflows
from app.schemas.payment import (
    BulkPaymentFailure,
    BulkPaymentRequest,
    BulkPaymentResponse,
    PaymentRecordRequest,
    PaymentRecordResponse,
    RefundRequest,
    RefundResponse,
)
from app.schemas.workflow import WorkflowResultResponse
from app.shared.context import ActorContext

router = APIRouter()


@router.post(
    "",
    status_code=201,
    response_model=WorkflowResultResponse[PaymentRecordResponse],
)
async def record_payment(
    body: PaymentRecordRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[PaymentWorkflows, Depends(get_payment_workflows)],
) -> JSONResponse:
    """Record a payment against a bill and send the receipt."""
    result = await workflows.record_payment(body.to_input(), actor)
    return workflow_response(result, PaymentRecordResponse, success_status=201)


@router.post("/bulk", response_model=BulkPaymentResponse)
async def record_bulk_payments(
    body: BulkPaymentRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[PaymentWorkflows, Depends(get_payment_workflows)],
) -> BulkPaymentResponse:
    """Record payments one by one; failures are reported per bill."""
    output = await workflows.record_bulk_payments([p.to_input() for p in body.payments], actor)
    return BulkPaymentResponse(
        total_payments=output.total_payments,
        total_amount=output.total_amount,
        payment_ids=list(output.payment_ids),
        failures=[BulkPaymentFailure(bill_id=b, message=m) for b, m in output.failures],
    )


@router.post(
    "/{payment_id}/refunds",
    status_code=201,
    response_model=WorkflowResultResponse[RefundResponse],
)
async def refund_payment(
    payment_id: str,
    body: RefundRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
    workflows: Annotated[PaymentWorkflows, Depends(get_payment_workflows)],
) -> JSONResponse:
    """Refund all or part of a payment and restore the bill balance."""
    result = await workflows.refund_payment(body.to_input(payment_id), actor)
    return workflow_response(result, RefundResponse, success_status=201)
