"""Workflow sets: tenant onboarding and transfers, payments, exits, approvals."""

from app.application.use_cases.workflows.approval import ApprovalWorkflows
from app.application.use_cases.workflows.exit import ExitWorkflows
from app.application.use_cases.workflows.payment import PaymentWorkflows
from app.application.use_cases.workflows.tenant import TenantWorkflows

__all__ = [
    "ApprovalWorkflows",
    "ExitWorkflows",
    "PaymentWorkflows",
    "TenantWorkflows",
]
