# ==============================================================================
# CUSTOM EXCEPTIONS - Application Error Hierarchy
# ==============================================================================
# Structured exception classes for consistent error handling
# Each exception maps to appropriate HTTP status codes
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class AppException(Exception):
    """
    Base exception for all application errors.

    Provides a consistent interface for error handling with:
    - Error code for programmatic identification
    - HTTP status code mapping
    - Detailed message and optional context

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code to return
        details: Additional context dictionary
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for JSON response.

        Returns:
            Dictionary containing error details
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"status_code={self.status_code})"
        )


# ==============================================================================
# DATABASE EXCEPTIONS
# ==============================================================================

class DatabaseError(AppException):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to:
    - Connection issues
    - Query execution failures
    - Transaction errors
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            status_code=503,
            details=details,
        )


class StoreClosedError(DatabaseError):
    """
    Raised when a record store is used after it has been closed.

    A closed store never reconnects; construct a new one instead.
    """

    def __init__(
        self,
        message: str = "Record store is closed",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "STORE_CLOSED"


class ConstraintViolationError(AppException):
    """
    Raised when the database rejects a write because of a uniqueness,
    foreign-key or not-null constraint.

    Maps to HTTP 409 Conflict. The driver's original error is chained
    as ``__cause__``.
    """

    def __init__(
        self,
        message: str = "Database constraint violated",
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        if table:
            _details["table"] = table

        super().__init__(
            message=message,
            error_code="CONSTRAINT_VIOLATION",
            status_code=409,
            details=_details,
        )
        self.table = table


# ==============================================================================
# RESOURCE EXCEPTIONS
# ==============================================================================

class NotFoundError(AppException):
    """
    Raised when a requested resource does not exist.

    Maps to HTTP 404 Not Found.

    Attributes:
        resource_type: Type of resource that was not found
        resource_id: Identifier of the missing resource
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ) -> None:
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = str(resource_id)

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class RecordNotFoundError(NotFoundError):
    """
    Raised when an update or delete targets a unique filter that
    matches no record.
    """

    def __init__(
        self,
        table: str,
        where: Dict[str, Any],
        operation: str,
    ) -> None:
        super().__init__(
            message=f"No {table} record found for {operation}",
            resource_type=table,
        )
        self.error_code = "RECORD_NOT_FOUND"
        self.details["where"] = {key: str(value) for key, value in where.items()}
        self.table = table
        self.operation = operation


class AlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    Maps to HTTP 409 Conflict.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        resource_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        if resource_type:
            _details["resource_type"] = resource_type

        super().__init__(
            message=message,
            error_code="ALREADY_EXISTS",
            status_code=409,
            details=_details,
        )


# ==============================================================================
# VALIDATION EXCEPTIONS
# ==============================================================================

class ValidationError(AppException):
    """
    Raised when input validation fails.

    Maps to HTTP 422 Unprocessable Entity.
    Contains field-level validation errors.
    """

    def __init__(
        self,
        message: str = "Validation error",
        errors: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=422,
            details={"validation_errors": errors or {}},
        )
        self.errors = errors or {}


class InvalidTableError(ValidationError):
    """
    Raised when a table name is not one of the known tables.

    Raised before any database access takes place.
    """

    def __init__(self, name: Any, valid: Iterable[str]) -> None:
        valid = list(valid)
        super().__init__(
            message=(
                f"Invalid model name: {name}. "
                f"Valid models are: {', '.join(valid)}"
            ),
            errors={"table": str(name)},
        )
        self.error_code = "INVALID_TABLE"
        self.details["valid_tables"] = valid
        self.name = name


class InvalidQueryError(ValidationError):
    """
    Raised when a filter, projection, ordering or update payload does
    not fit the target table.
    """

    def __init__(
        self,
        message: str = "Invalid query",
        table: Optional[str] = None,
        field: Optional[str] = None,
    ) -> None:
        errors: Dict[str, Any] = {}
        if table:
            errors["table"] = table
        if field:
            errors["field"] = field
        super().__init__(message=message, errors=errors)
        self.error_code = "INVALID_QUERY"


class BadRequestError(AppException):
    """
    Raised for malformed or invalid requests.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="BAD_REQUEST",
            status_code=400,
            details=details,
        )


# ==============================================================================
# AUTHENTICATION & AUTHORIZATION EXCEPTIONS
# ==============================================================================

class AuthenticationError(AppException):
    """
    Raised when authentication fails.

    Maps to HTTP 401 Unauthorized.

    Common causes:
    - Invalid or expired token
    - Missing authentication header
    - Invalid credentials
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_ERROR",
            status_code=401,
            details=details,
        )


class AuthorizationError(AppException):
    """
    Raised when user lacks permission for an action.

    Maps to HTTP 403 Forbidden.
    """

    def __init__(
        self,
        message: str = "Permission denied",
        required_permission: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        _details = details or {}
        if required_permission:
            _details["required_permission"] = required_permission

        super().__init__(
            message=message,
            error_code="AUTHORIZATION_ERROR",
            status_code=403,
            details=_details,
        )


class TokenExpiredError(AuthenticationError):
    """
    Raised when JWT token has expired.
    """

    def __init__(
        self,
        message: str = "Token has expired",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "TOKEN_EXPIRED"


class InvalidTokenError(AuthenticationError):
    """
    Raised when JWT token is invalid or malformed.
    """

    def __init__(
        self,
        message: str = "Invalid token",
    ) -> None:
        super().__init__(message=message)
        self.error_code = "INVALID_TOKEN"


# ==============================================================================
# STORAGE EXCEPTIONS
# ==============================================================================

class QuotaExceededError(AppException):
    """
    Raised when an upload would push a user past their storage quota.

    Maps to HTTP 413 Payload Too Large.
    """

    def __init__(
        self,
        message: str = "Storage quota exceeded",
        required_bytes: Optional[int] = None,
        available_bytes: Optional[int] = None,
    ) -> None:
        details = {}
        if required_bytes is not None:
            details["required_bytes"] = required_bytes
        if available_bytes is not None:
            details["available_bytes"] = available_bytes

        super().__init__(
            message=message,
            error_code="QUOTA_EXCEEDED",
            status_code=413,
            details=details,
        )


class FileTooLargeError(AppException):
    """
    Raised when a single upload exceeds ``MAX_UPLOAD_SIZE_MB``.

    Maps to HTTP 413 Payload Too Large.
    """

    def __init__(
        self,
        max_bytes: int,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(
            message=message or f"File exceeds the upload limit of {max_bytes} bytes",
            error_code="FILE_TOO_LARGE",
            status_code=413,
            details={"max_bytes": max_bytes},
        )
