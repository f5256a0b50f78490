"""
Base exception classes for application-wide error handling.

Every domain error raised by the billing core derives from
BaseApplicationError so that API views, Celery tasks and service results
can report failures the same way: a human-readable message, a
machine-readable error code and optional structured details.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Caller supplied invalid input
    │   └── InvalidInputError - Bad amount, rate or duration
    ├── NotFoundError - Referenced record does not exist
    ├── ConflictError - Operation conflicts with current state
    └── PersistenceError - Storage layer failure (safe to retry)

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError(
        f"Booking {booking_id} not found",
        error_code="BOOKING_NOT_FOUND",
        details={"booking_id": str(booking_id)},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=400)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, amounts, states)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Booking 42 has already been paid",
                "error_code": "DUPLICATE_PAYMENT",
                "details": {"booking_id": "42"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails in the service layer.

    Use for malformed amounts, rates, durations and other business rule
    violations that are the caller's fault and must not be retried.

    Note:
        DRF serializers handle request-shape validation. This class is for
        rules enforced below the API layer.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested record is not found.

    Example:
        raise NotFoundError(
            f"No active pricing for icu at hospital {hospital_id}",
            error_code="PRICING_NOT_FOUND",
            details={"hospital_id": str(hospital_id), "resource_type": "icu"},
        )
    """

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with the current state of a record.

    Use for:
    - Duplicate payments or refunds
    - Invalid state transitions
    - Lock contention and optimistic locking failures

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"


class InvalidInputError(ValidationError):
    """
    Raised for a malformed monetary input: non-positive duration or rate,
    a service charge rate outside [0, 1], or an amount that does not add up.
    """

    default_error_code: str = "INVALID_INPUT"


class PersistenceError(BaseApplicationError):
    """
    Raised when the database rejects or loses a write.

    The surrounding transaction has been rolled back when this is raised,
    so callers may retry with the same booking id; duplicate guards make the
    retry safe.
    """

    default_error_code: str = "PERSISTENCE_ERROR"
