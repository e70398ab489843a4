"""
Application Error Classes

Centralized error handling with the service's error envelope:
    {"status": "error", "message": ..., "error": <code>, "request_id": ...}

Usage:
    from account_registry.errors import AppError, Errors

    # Raise a validation error
    raise Errors.validation("Username must not be empty", {"field": "username"})

    # Raise a not found error
    raise Errors.not_found("Account", "alice")
"""
from typing import Optional, Any
from uuid import uuid4


# Error code type
ErrorCode = str


class AppError(Exception):
    """
    Application error class for consistent error handling.

    Attributes:
        code: Error code (e.g., 'VALIDATION_ERROR', 'CONFLICT_ERROR')
        status: HTTP status code
        message: Caller-facing message
        details: Additional error details (for internal logging)
        request_id: UUID for request tracing
    """

    code: ErrorCode = "INTERNAL_ERROR"
    status: int = 500

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Any] = None,
        code: Optional[ErrorCode] = None,
        status: Optional[int] = None,
        request_id: Optional[str] = None,
    ):
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status
        self.message = message or self._get_public_message()
        self.details = details
        self.request_id = request_id or str(uuid4())
        super().__init__(self.message)

    def to_dict(self, is_production: bool = True) -> dict:
        """
        Convert error to the JSON error envelope.

        Args:
            is_production: If True, hide internal details

        Returns:
            Error response dictionary
        """
        response = {
            "status": "error",
            "message": self.message,
            "error": self.code,
            "request_id": self.request_id,
        }

        # Include details in non-production
        if not is_production and self.details is not None:
            response["details"] = self.details

        return response

    def _get_public_message(self) -> str:
        """Get user-friendly message for error code."""
        messages = {
            "VALIDATION_ERROR": "Invalid input.",
            "AUTH_ERROR": "Authentication required.",
            "NOT_FOUND_ERROR": "The requested resource was not found.",
            "CONFLICT_ERROR": "The request conflicts with the current state.",
            "RATE_LIMIT_ERROR": "Too many requests. Please try again later.",
            "INTERNAL_ERROR": "Internal server error.",
        }
        return messages.get(self.code, messages["INTERNAL_ERROR"])


class ValidationError(AppError):
    """Missing or malformed input; the operation was not attempted."""

    code = "VALIDATION_ERROR"
    status = 400


class AuthError(AppError):
    code = "AUTH_ERROR"
    status = 401


class NotFoundError(AppError):
    """Target username/id is absent."""

    code = "NOT_FOUND_ERROR"
    status = 404


class ConflictError(AppError):
    """Duplicate username; nothing was written."""

    code = "CONFLICT_ERROR"
    status = 409


class StorageError(AppError):
    """
    Underlying persistence failure.

    The operation's effect must be treated as not committed.
    """

    code = "INTERNAL_ERROR"
    status = 500


class Errors:
    """Factory class for creating AppError instances."""

    @staticmethod
    def validation(message: Optional[str] = None, details: Optional[Any] = None) -> ValidationError:
        """Create validation error (400)."""
        return ValidationError(message, details)

    @staticmethod
    def auth(message: Optional[str] = None) -> AuthError:
        """Create authentication error (401)."""
        return AuthError(message)

    @staticmethod
    def not_found(resource: str, key: Optional[Any] = None) -> NotFoundError:
        """Create not found error (404)."""
        message = f"{resource} not found" if key is None else f"{resource} '{key}' not found"
        return NotFoundError(message, {"resource": resource, "key": key})

    @staticmethod
    def conflict(message: Optional[str] = None, details: Optional[Any] = None) -> ConflictError:
        """Create conflict error (409)."""
        return ConflictError(message, details)

    @staticmethod
    def rate_limit(retry_after: Optional[Any] = None) -> AppError:
        """Create rate limit error (429)."""
        return AppError(
            details={"retryAfter": retry_after},
            code="RATE_LIMIT_ERROR",
            status=429,
        )

    @staticmethod
    def storage(message: Optional[str] = None, details: Optional[Any] = None) -> StorageError:
        """Create storage (internal) error (500)."""
        return StorageError(message, details)
