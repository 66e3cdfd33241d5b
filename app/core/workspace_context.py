"""Workspace and actor identity taken from request headers.

The authentication collaborator in front of this service supplies the
workspace id and the acting user; both are trusted as given once their
format checks out. Shared by the workspace middleware, the request
dependencies and the database session setup.
"""

import re
from collections.abc import Iterable

from app.core.config import Settings
from app.domain.exceptions import (
    AuthenticationException,
    ValidationException,
    WorkspaceContextMissingException,
)
from app.shared.context import ActorContext
from app.shared.enums import ActorType
from app.shared.request_audit import header_value

# CUID/UUID-style ids; also bounds what reaches SET LOCAL.
WORKSPACE_ID_MAX_LENGTH = 64
_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{1," + str(WORKSPACE_ID_MAX_LENGTH) + r"}$")


def is_valid_workspace_id(value: str | None) -> bool:
    """Return True if value is safe for SET LOCAL and header use."""
    if not value or len(value) > WORKSPACE_ID_MAX_LENGTH:
        return False
    return bool(_ID_RE.fullmatch(value))


def actor_from_headers(
    headers: Iterable[tuple[bytes, bytes]],
    settings: Settings,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ActorContext:
    """Build the actor for a request.

    Raises:
        WorkspaceContextMissingException: no workspace header.
        ValidationException: malformed workspace id or unknown actor type.
        AuthenticationException: a non-system actor without an actor id.
    """
    headers = list(headers)
    workspace_id = header_value(headers, settings.workspace_header_name)
    if not workspace_id:
        raise WorkspaceContextMissingException(settings.workspace_header_name)
    if not is_valid_workspace_id(workspace_id):
        raise ValidationException("Invalid workspace id format", field="workspace_id")

    raw_type = (header_value(headers, settings.actor_type_header) or ActorType.OWNER.value)
    try:
        actor_type = ActorType(raw_type.strip().lower())
    except ValueError:
        raise ValidationException(
            f"Unknown actor type: {raw_type}", field="actor_type"
        ) from None

    actor_id = header_value(headers, settings.actor_id_header)
    if not actor_id:
        if actor_type != ActorType.SYSTEM:
            raise AuthenticationException(
                f"Missing {settings.actor_id_header} header for {actor_type.value} actor"
            )
        actor_id = "system"
    return ActorContext(
        actor_id=actor_id.strip(),
        actor_type=actor_type,
        workspace_id=workspace_id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
