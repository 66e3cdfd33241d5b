"""Database error mapping.

Translates SQLAlchemy / driver exceptions into ServiceError codes with a
description fit for user display, instead of surfacing driver text verbatim.
"""

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from app.application.dtos.service_result import ErrorCode, ServiceError

# PostgreSQL SQLSTATE codes (asyncpg exposes them as .sqlstate on the orig error).
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"
_NOT_NULL_VIOLATION = "23502"
_CHECK_VIOLATION = "23514"
_INSUFFICIENT_PRIVILEGE = "42501"
_SERIALIZATION_FAILURE = "40001"

_SQLSTATE_DESCRIPTIONS: dict[str, tuple[ErrorCode, str]] = {
    _UNIQUE_VIOLATION: (ErrorCode.DUPLICATE_ENTRY, "A record with these details already exists"),
    _FOREIGN_KEY_VIOLATION: (ErrorCode.VALIDATION_ERROR, "Referenced record does not exist"),
    _NOT_NULL_VIOLATION: (ErrorCode.VALIDATION_ERROR, "A required field is missing"),
    _CHECK_VIOLATION: (ErrorCode.VALIDATION_ERROR, "A field value is out of the allowed range"),
    _INSUFFICIENT_PRIVILEGE: (ErrorCode.PERMISSION_DENIED, "You do not have access to this record"),
    _SERIALIZATION_FAILURE: (
        ErrorCode.CONCURRENT_MODIFICATION,
        "The record was modified by another request; please retry",
    ),
}


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = getattr(exc, "orig", None)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def describe_db_error(exc: Exception, action: str = "complete the operation") -> ServiceError:
    """Map a persistence exception to a ServiceError.

    Args:
        exc: Exception raised by the session or driver.
        action: Short phrase for the generic message (e.g. "create payment").
    """
    if isinstance(exc, DBAPIError):
        state = _sqlstate(exc)
        if state in _SQLSTATE_DESCRIPTIONS:
            code, message = _SQLSTATE_DESCRIPTIONS[state]
            return ServiceError(code=code, message=message, details={"sqlstate": state}, cause=exc)
        if isinstance(exc, IntegrityError):
            return ServiceError(
                code=ErrorCode.VALIDATION_ERROR,
                message="The data violates a database constraint",
                cause=exc,
            )
        if isinstance(exc, OperationalError):
            return ServiceError(
                code=ErrorCode.UNKNOWN_ERROR,
                message="The database is temporarily unavailable",
                cause=exc,
            )
    return ServiceError(
        code=ErrorCode.UNKNOWN_ERROR,
        message=f"Failed to {action}",
        cause=exc,
    )
