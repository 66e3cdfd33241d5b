"""Tests for request identity: workspace and actor headers, request ids."""

import pytest

from app.core.config import get_settings
from app.core.workspace_context import actor_from_headers, is_valid_workspace_id
from app.domain.exceptions import (
    AuthenticationException,
    ValidationException,
    WorkspaceContextMissingException,
)
from app.middleware.request_id import sanitize_request_id
from app.shared.context import clear_current_actor, get_actor_context, set_current_actor
from app.shared.enums import ActorType


def _headers(**values: str) -> list[tuple[bytes, bytes]]:
    names = {
        "workspace": b"x-workspace-id",
        "actor_id": b"x-actor-id",
        "actor_type": b"x-actor-type",
    }
    return [(names[k], v.encode()) for k, v in values.items()]


def test_actor_from_headers_builds_context() -> None:
    actor = actor_from_headers(
        _headers(workspace="ws_1", actor_id=" staff_9 ", actor_type="Staff"),
        get_settings(),
        ip_address="10.1.1.1",
        user_agent="curl",
    )
    assert actor.workspace_id == "ws_1"
    assert actor.actor_id == "staff_9"
    assert actor.actor_type == ActorType.STAFF
    assert actor.ip_address == "10.1.1.1"


def test_actor_type_defaults_to_owner() -> None:
    actor = actor_from_headers(_headers(workspace="ws_1", actor_id="u1"), get_settings())
    assert actor.actor_type == ActorType.OWNER


def test_system_actor_needs_no_id() -> None:
    actor = actor_from_headers(_headers(workspace="ws_1", actor_type="system"), get_settings())
    assert actor.actor_id == "system"


def test_missing_workspace_header() -> None:
    with pytest.raises(WorkspaceContextMissingException) as exc_info:
        actor_from_headers(_headers(actor_id="u1"), get_settings())
    assert exc_info.value.error_code == "WORKSPACE_REQUIRED"
    assert exc_info.value.details == {"header": "X-Workspace-ID"}


def test_malformed_workspace_id() -> None:
    with pytest.raises(ValidationException) as exc_info:
        actor_from_headers(_headers(workspace="ws'; drop", actor_id="u1"), get_settings())
    assert exc_info.value.details == {"field": "workspace_id"}


def test_unknown_actor_type() -> None:
    with pytest.raises(ValidationException, match="Unknown actor type: robot"):
        actor_from_headers(
            _headers(workspace="ws_1", actor_id="u1", actor_type="robot"), get_settings()
        )


def test_non_system_actor_requires_id() -> None:
    with pytest.raises(AuthenticationException, match="X-Actor-ID"):
        actor_from_headers(_headers(workspace="ws_1", actor_type="tenant"), get_settings())


@pytest.mark.parametrize(
    ("value", "valid"),
    [
        ("ws_1", True),
        ("clx8a9b0c0000qwerty", True),
        ("a" * 64, True),
        ("a" * 65, False),
        ("", False),
        (None, False),
        ("ws 1", False),
        ("ws'1", False),
    ],
)
def test_is_valid_workspace_id(value, valid) -> None:
    assert is_valid_workspace_id(value) is valid


def test_sanitize_request_id_keeps_safe_values() -> None:
    assert sanitize_request_id(" req-42_a ") == "req-42_a"


@pytest.mark.parametrize("raw", [None, "", "bad id", "x" * 65, "id\r\nInjected: 1"])
def test_sanitize_request_id_replaces_unsafe_values(raw) -> None:
    replaced = sanitize_request_id(raw)
    assert replaced != raw
    assert len(replaced) == 36


def test_request_context_snapshot_and_clear() -> None:
    set_current_actor("owner_1", ActorType.OWNER, "ws_1", "10.0.0.2")
    try:
        actor = get_actor_context()
        assert actor is not None
        assert actor.actor_id == "owner_1"
        assert actor.workspace_id == "ws_1"
        assert actor.ip_address == "10.0.0.2"
    finally:
        clear_current_actor()
    assert get_actor_context() is None


def test_set_current_actor_requires_id_for_non_system() -> None:
    with pytest.raises(ValueError):
        set_current_actor(None, ActorType.TENANT, "ws_1")
