"""Pydantic request/response schemas for the API."""

from app.schemas.approval import (
    ApprovalCreateRequest,
    ApprovalCreateResponse,
    ApprovalDecisionRequest,
    ApprovalDecisionResponse,
    BulkDecisionRequest,
    BulkDecisionResponse,
)
from app.schemas.audit_event import AuditEventListResponse, AuditEventResponse
from app.schemas.exit_clearance import (
    ExitCompleteRequest,
    ExitCompleteResponse,
    ExitInitiateRequest,
    ExitInitiateResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.notification import WhatsAppLinkRequest, WhatsAppLinkResponse
from app.schemas.payment import (
    BulkPaymentRequest,
    BulkPaymentResponse,
    PaymentRecordRequest,
    PaymentRecordResponse,
    RefundRequest,
    RefundResponse,
)
from app.schemas.tenant import (
    RoomTransferRequest,
    RoomTransferResponse,
    TenantCreateRequest,
    TenantCreateResponse,
)
from app.schemas.workflow import ServiceErrorResponse, WorkflowResultResponse

__all__ = [
    "ApprovalCreateRequest",
    "ApprovalCreateResponse",
    "ApprovalDecisionRequest",
    "ApprovalDecisionResponse",
    "AuditEventListResponse",
    "AuditEventResponse",
    "BulkDecisionRequest",
    "BulkDecisionResponse",
    "BulkPaymentRequest",
    "BulkPaymentResponse",
    "ExitCompleteRequest",
    "ExitCompleteResponse",
    "ExitInitiateRequest",
    "ExitInitiateResponse",
    "HealthResponse",
    "PaymentRecordRequest",
    "PaymentRecordResponse",
    "RefundRequest",
    "RefundResponse",
    "RoomTransferRequest",
    "RoomTransferResponse",
    "ServiceErrorResponse",
    "TenantCreateRequest",
    "TenantCreateResponse",
    "WhatsAppLinkRequest",
    "WhatsAppLinkResponse",
    "WorkflowResultResponse",
]
