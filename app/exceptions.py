"""
Domain Exceptions

Every failure a service can report is an AppError subclass carrying:
- code: stable machine-readable identifier (part of the API contract)
- message: human-readable explanation
- status_code: HTTP status used by the exception handler in main.py
- details: optional field-level information (validation errors)

Services raise these; they never raise HTTPException. The mapping to HTTP
lives in one place (app.main), so services stay usable outside FastAPI
(scripts, tests).
"""

from typing import Any

from fastapi import status


class AppError(Exception):
    """Base class for all expected application errors."""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or []
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the error envelope returned by the API."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(AppError):
    """Malformed or out-of-range input. `details` lists the offending fields."""

    code = "validation_error"
    # Literal: the starlette constant name changed between releases
    status_code = 422
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(details=[{"field": field, "message": message}])


class NotFoundError(AppError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ForbiddenError(AppError):
    """Authenticated, but not the owner of the resource."""

    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized to modify this resource"


class ConflictError(AppError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class UnauthenticatedError(AppError):
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class InternalFailureError(AppError):
    """Persistence failure. The message never carries internal detail."""

    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An internal error occurred. Please try again later."


class RatingRecalculationError(InternalFailureError):
    """
    The book's rating aggregate could not be recomputed.

    Raised after the triggering review write has already been committed:
    the review change stands, the book's averageRating/reviewCount stay
    stale until the next successful recompute for that book.
    """

    code = "rating_recalculation_failed"
    default_message = (
        "Your change was saved, but the book rating could not be updated."
    )

    def __init__(self, book_id: int, message: str | None = None) -> None:
        self.book_id = book_id
        super().__init__(message)
