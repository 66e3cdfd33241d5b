"""Application use cases: one entry point per workflow."""

from app.application.use_cases.workflows import (
    ApprovalWorkflows,
    ExitWorkflows,
    PaymentWorkflows,
    TenantWorkflows,
)

__all__ = [
    "ApprovalWorkflows",
    "ExitWorkflows",
    "PaymentWorkflows",
    "TenantWorkflows",
]
