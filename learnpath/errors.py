"""
learnpath/errors.py
Centralized Error Handling

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 400: Invalid input (ValidationError) or blocked by a dependent row (ConstraintError)
- 401: Authentication missing or invalid
- 403: Role insufficient
- 404: Referenced entity does not exist
- 409: Unique constraint violation
- 429: Rate limit exceeded
- 500: Internal only, never caused by user input
"""

import logging
from typing import Optional, Dict, Any, List
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    FORBIDDEN = "FORBIDDEN"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    PATH_NOT_FOUND = "PATH_NOT_FOUND"
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    CONTENT_NOT_FOUND = "CONTENT_NOT_FOUND"
    QUESTION_NOT_FOUND = "QUESTION_NOT_FOUND"
    PROGRESS_NOT_FOUND = "PROGRESS_NOT_FOUND"

    CONFLICT = "CONFLICT"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    DUPLICATE_SLUG = "DUPLICATE_SLUG"

    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    TREE_INVALID = "TREE_INVALID"

    RATE_LIMITED = "RATE_LIMITED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None


class APIError(Exception):
    """Base API exception with consistent structure"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "success": False,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict(), headers=headers)


class ValidationError(APIError):
    """400 Bad Request - malformed or missing input"""
    def __init__(
        self,
        message: str,
        code: str = ErrorCode.VALIDATION_ERROR,
        errors: Optional[List[Dict[str, str]]] = None,
        field: Optional[str] = None
    ):
        if errors is None and field is not None:
            errors = [{"field": field, "message": message}]
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Validation Error",
            message=message,
            code=code,
            details={"errors": errors} if errors else None
        )


class UnauthorizedError(APIError):
    """401 Unauthorized - Authentication required"""
    def __init__(self, message: str = "Authentication required", code: str = ErrorCode.AUTH_REQUIRED):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="Unauthorized",
            message=message,
            code=code
        )

    def to_response(self, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        return super().to_response(headers={"WWW-Authenticate": "Bearer", **(headers or {})})


class ForbiddenError(APIError):
    """403 Forbidden - Access denied"""
    def __init__(self, message: str, code: str = ErrorCode.FORBIDDEN, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Forbidden",
            message=message,
            code=code,
            details=details
        )


class NotFoundError(APIError):
    """404 Not Found - Resource does not exist"""
    def __init__(self, resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND, message: Optional[str] = None):
        if message is None:
            message = f"{resource} not found"
            if identifier is not None:
                message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=message,
            code=code,
            details={"resource": resource, "id": identifier} if identifier is not None else None
        )


class ConflictError(APIError):
    """409 Conflict - unique constraint violation"""
    def __init__(self, message: str, code: str = ErrorCode.CONFLICT, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="Conflict",
            message=message,
            code=code,
            details=details
        )


class ConstraintError(APIError):
    """400 Bad Request - a dependent row blocks the operation"""
    def __init__(self, message: str, code: str = ErrorCode.CONSTRAINT_VIOLATION, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Constraint Violation",
            message=message,
            code=code,
            details=details
        )


class RateLimitError(APIError):
    """429 Too Many Requests"""
    def __init__(self, message: str = "Rate limit exceeded. Please try again later.", limit: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error="Rate Limited",
            message=message,
            code=ErrorCode.RATE_LIMITED,
            details={"limit": limit} if limit else None
        )


class InternalError(APIError):
    """500 Internal Server Error - Use sparingly, only for true internal failures"""
    def __init__(self, message: str = "An unexpected error occurred. Please try again later.", log_id: Optional[str] = None):
        details = {"log_id": log_id} if log_id else None
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Internal Error",
            message=message,
            code=ErrorCode.INTERNAL_ERROR,
            details=details
        )


def translate_integrity_error(
    exc: IntegrityError,
    conflict_message: str = "This record already exists",
    constraint_message: str = "This record is referenced by other data and cannot be changed",
) -> APIError:
    """
    Map a database integrity failure onto the API taxonomy.

    Works on SQLite ("UNIQUE constraint failed" / "FOREIGN KEY constraint
    failed") and PostgreSQL (SQLSTATE 23505 / 23503).
    """
    orig = getattr(exc, "orig", exc)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    text = str(orig).lower()

    if sqlstate == "23505" or "unique" in text or "duplicate" in text:
        return ConflictError(conflict_message)
    if sqlstate == "23503" or "foreign key" in text:
        return ConstraintError(constraint_message)

    logger.error(f"Unclassified integrity error: {type(orig).__name__}: {orig}")
    return ValidationError("The request violates a data integrity rule")


def request_validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten FastAPI/pydantic error dicts into [{field, message}]."""
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc) or "request",
            "message": error.get("msg", "Invalid value"),
        })
    return details


ERROR_MAPPING = {
    400: ("Validation Error", ErrorCode.VALIDATION_ERROR),
    401: ("Unauthorized", ErrorCode.AUTH_REQUIRED),
    403: ("Forbidden", ErrorCode.FORBIDDEN),
    404: ("Not Found", ErrorCode.NOT_FOUND),
    409: ("Conflict", ErrorCode.CONFLICT),
    429: ("Too Many Requests", ErrorCode.RATE_LIMITED),
    500: ("Internal Error", ErrorCode.INTERNAL_ERROR),
}


def get_error_summary() -> Dict[str, Any]:
    """Return summary of error handling system for documentation"""
    return {
        "service": "api-error-handler",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "error": "string (error type)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)"
        },
        "status_codes": {
            str(code): name for code, (name, _) in ERROR_MAPPING.items()
        },
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }
