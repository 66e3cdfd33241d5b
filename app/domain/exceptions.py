"""Domain exceptions for the ManageKar application.

Raised at the HTTP edge and by infrastructure misconfiguration. Service
calls and workflow steps never raise across their boundary; they return a
ServiceResult instead. Presentation layer maps these exceptions to HTTP
responses in exception handlers.
"""

from typing import Any


class ManageKarException(Exception):
    """Base exception for all ManageKar application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ManageKarException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(ManageKarException):
    """Raised when the request carries no usable actor identity."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(ManageKarException):
    """Raised when the actor type may not perform the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'approval', 'payment').
            action: Optional action that was attempted (e.g. 'decide').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class WorkspaceContextMissingException(ManageKarException):
    """Raised when a workspace-scoped request has no workspace id."""

    def __init__(self, header_name: str) -> None:
        super().__init__(
            f"Missing workspace context: set the {header_name} header",
            "WORKSPACE_REQUIRED",
            {"header": header_name},
        )


class ResourceNotFoundException(ManageKarException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class UnknownEntityTypeException(ManageKarException):
    """Raised when an entity type has no persistence table mapped."""

    def __init__(self, entity_type: str) -> None:
        super().__init__(
            f"No table mapped for entity type: {entity_type}",
            "UNKNOWN_ENTITY_TYPE",
            {"entity_type": entity_type},
        )


class SqlNotConfiguredException(ManageKarException):
    """Raised when an operation requires Postgres but the backend is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
