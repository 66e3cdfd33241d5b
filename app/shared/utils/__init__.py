"""Shared utilities: datetime, generators."""

from app.shared.utils.datetime import (
    day_of_next_month,
    utc_now,
)
from app.shared.utils.generators import (
    format_sequence_number,
    generate_cuid,
    generate_workflow_id,
)

__all__ = [
    "generate_cuid",
    "generate_workflow_id",
    "format_sequence_number",
    "utc_now",
    "day_of_next_month",
]
