"""Custom exception hierarchy for Noteria.

Services raise these; the exception handler middleware turns them into
``{"error", "message", "details"}`` JSON bodies. A room or note owned by
someone else is reported exactly like one that does not exist.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Room errors
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"

    # Note errors
    NOTE_NOT_FOUND = "NOTE_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Auth & rate limiting
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class NoteriaException(Exception):
    """
    Base exception for all Noteria errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details (which id, which field)
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class RoomNotFoundError(NoteriaException):
    """Room does not exist or belongs to another owner."""

    def __init__(self, room_id: str):
        super().__init__(
            f"Room not found: {room_id}",
            ErrorCode.ROOM_NOT_FOUND,
            status_code=404,
            details={"room_id": room_id}
        )


class NoteNotFoundError(NoteriaException):
    """Note does not exist or belongs to another owner."""

    def __init__(self, note_id: str):
        super().__init__(
            f"Note not found: {note_id}",
            ErrorCode.NOTE_NOT_FOUND,
            status_code=404,
            details={"note_id": note_id}
        )


class ValidationError(NoteriaException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class CircularReferenceError(NoteriaException):
    """Moving the room under this parent would create a cycle."""

    def __init__(self, room_id: str, parent_id: str):
        super().__init__(
            f"Cannot move room {room_id} under its own descendant {parent_id}",
            ErrorCode.CIRCULAR_REFERENCE,
            status_code=400,
            details={"room_id": room_id, "parent_id": parent_id}
        )


class AuthenticationError(NoteriaException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class RateLimitedError(NoteriaException):
    """Caller spent its request budget. Built by the middleware, not raised."""

    def __init__(self, retry_after: float):
        super().__init__(
            "Too many requests",
            ErrorCode.RATE_LIMITED,
            status_code=429,
            details={"retry_after": round(retry_after, 1)}
        )
        self.retry_after = retry_after


class DatabaseError(NoteriaException):
    """Database operation failed.

    The driver error carries SQL text and bound parameters, so it is kept on
    ``original_error`` for the server log and never copied into ``details``.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
        )
        self.original_error = original_error
