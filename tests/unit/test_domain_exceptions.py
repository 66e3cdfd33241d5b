"""Tests for domain exceptions and their HTTP status mapping."""

import pytest

from app.core.exception_handlers import status_for_error_code
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ManageKarException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UnknownEntityTypeException,
    ValidationException,
    WorkspaceContextMissingException,
)


def test_base_exception_default_error_code() -> None:
    """ManageKarException uses the class name when no error_code is given."""
    exc = ManageKarException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "ManageKarException"
    assert exc.details == {}
    assert str(exc) == "Something failed"


def test_base_exception_to_dict() -> None:
    exc = ManageKarException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("Invalid phone", field="phone")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "phone"}
    assert ValidationException("Invalid").details == {}


def test_authentication_exception_default_message() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_with_resource_and_action() -> None:
    exc = AuthorizationException("approval", "decide")
    assert exc.message == "Permission denied: decide on approval"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {"resource": "approval", "action": "decide"}


def test_authorization_exception_default() -> None:
    exc = AuthorizationException()
    assert exc.message == "Permission denied"
    assert exc.details == {}


def test_workspace_context_missing() -> None:
    exc = WorkspaceContextMissingException("X-Workspace-ID")
    assert exc.error_code == "WORKSPACE_REQUIRED"
    assert "X-Workspace-ID" in exc.message


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("tenant", "t_1")
    assert exc.message == "tenant not found: t_1"
    assert exc.details == {"resource_type": "tenant", "resource_id": "t_1"}


def test_unknown_entity_type() -> None:
    exc = UnknownEntityTypeException("spaceship")
    assert exc.error_code == "UNKNOWN_ENTITY_TYPE"
    assert exc.details == {"entity_type": "spaceship"}


def test_sql_not_configured() -> None:
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"


@pytest.mark.parametrize(
    ("code", "status"),
    [
        ("NOT_FOUND", 404),
        ("RESOURCE_NOT_FOUND", 404),
        ("PERMISSION_DENIED", 403),
        ("AUTHENTICATION_ERROR", 401),
        ("WORKSPACE_REQUIRED", 400),
        ("VALIDATION_ERROR", 400),
        ("APPROVAL_ALREADY_PROCESSED", 409),
        ("BILL_ALREADY_PAID", 409),
        ("SERVICE_UNAVAILABLE", 503),
        ("ROOM_AT_CAPACITY", 422),
        ("PAYMENT_EXCEEDS_DUE", 422),
        ("WORKFLOW_STEP_FAILED", 422),
    ],
)
def test_status_for_error_code(code, status) -> None:
    assert status_for_error_code(code) == status
