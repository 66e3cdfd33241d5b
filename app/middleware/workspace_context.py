"""Workspace context middleware for RLS and logging.

Sets the current actor (workspace, actor id and type, client ip and user
agent) in request context from the identity headers so that database
sessions run SET LOCAL app.current_workspace_id and log records carry the
workspace. Malformed identity leaves the context empty; the get_actor
dependency rejects such requests on routes that need a workspace.
"""

from __future__ import annotations

from typing import Callable

from app.core.config import get_settings
from app.core.workspace_context import actor_from_headers
from app.domain.exceptions import ManageKarException
from app.shared.context import clear_current_actor, set_current_actor
from app.shared.request_audit import client_identity


def WorkspaceContextMiddleware(app: Callable) -> Callable:
    """Set actor context from headers before the route runs. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        ip_address, user_agent = client_identity(scope)
        try:
            actor = actor_from_headers(
                scope.get("headers", []),
                get_settings(),
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except ManageKarException:
            clear_current_actor()
        else:
            set_current_actor(
                actor.actor_id,
                actor.actor_type,
                actor.workspace_id,
                actor.ip_address,
                actor.user_agent,
            )
        try:
            await app(scope, receive, send)
        finally:
            clear_current_actor()

    return asgi_app
