"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.workflow import (
    WorkflowDefinition,
    WorkflowStepDefinition,
)

__all__ = [
    "WorkflowDefinition",
    "WorkflowStepDefinition",
]
