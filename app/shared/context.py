"""Request context management using contextvars.

Holds the actor identity for the current request as supplied by the
authentication collaborator (trusted as given; no independent
authentication happens here).

Usage:
    set_current_actor(actor_id="owner_1", actor_type=ActorType.OWNER, workspace_id="ws_1")
    actor = get_actor_context()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from app.shared.enums import ActorType

_current_actor_id: ContextVar[str | None] = ContextVar("current_actor_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar(
    "current_actor_type", default=ActorType.SYSTEM
)
_current_workspace_id: ContextVar[str | None] = ContextVar(
    "current_workspace_id", default=None
)
_current_ip_address: ContextVar[str | None] = ContextVar(
    "current_ip_address", default=None
)
_current_user_agent: ContextVar[str | None] = ContextVar(
    "current_user_agent", default=None
)
_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of who is acting and in which workspace."""

    actor_id: str
    actor_type: ActorType
    workspace_id: str
    ip_address: str | None = None
    user_agent: str | None = None


def set_current_actor(
    actor_id: str | None,
    actor_type: ActorType = ActorType.OWNER,
    workspace_id: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Set the current actor for this request.

    Raises:
        ValueError: If actor_type is not SYSTEM and actor_id is empty.
    """
    if actor_type != ActorType.SYSTEM and not actor_id:
        raise ValueError(f"actor_id is required when actor_type is {actor_type.value}")
    _current_actor_id.set(actor_id)
    _current_actor_type.set(actor_type)
    _current_workspace_id.set(workspace_id)
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def clear_current_actor() -> None:
    """Clear the current actor context."""
    _current_actor_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)
    _current_workspace_id.set(None)
    _current_ip_address.set(None)
    _current_user_agent.set(None)


def get_current_workspace_id() -> str | None:
    """Return the workspace id for this request (read by DB session setup for RLS)."""
    return _current_workspace_id.get()


def get_actor_context() -> ActorContext | None:
    """Return a snapshot of the current actor, or None outside a workspace."""
    workspace_id = _current_workspace_id.get()
    if not workspace_id:
        return None
    return ActorContext(
        actor_id=_current_actor_id.get() or "system",
        actor_type=_current_actor_type.get(),
        workspace_id=workspace_id,
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
    )


def set_current_request_id(request_id: str | None) -> None:
    _current_request_id.set(request_id)


def get_current_request_id() -> str | None:
    """Return the sanitized request id for this request (read by the log filter)."""
    return _current_request_id.get()
