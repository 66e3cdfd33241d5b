"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.notification_channels import (
    InAppChannelSender,
    QueuedChannelSender,
    WhatsAppLinkChannelSender,
    build_channel_senders,
)
from app.infrastructure.services.workflow_engine import WorkflowEngine, create_workflow_context

__all__ = [
    "InAppChannelSender",
    "QueuedChannelSender",
    "WhatsAppLinkChannelSender",
    "WorkflowEngine",
    "build_channel_senders",
    "create_workflow_context",
]
