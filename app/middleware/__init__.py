"""HTTP middleware: request ID and workspace context.

Applied in main app; order matters (first added = outermost).
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.workspace_context import WorkspaceContextMiddleware

__all__ = [
    "RequestIDMiddleware",
    "WorkspaceContextMiddleware",
]
