"""
Exceptions raised by the booking workflow.
"""

from __future__ import annotations

from core.exceptions import ConflictError, NotFoundError


class BookingNotFoundError(NotFoundError):
    """The referenced booking does not exist."""

    default_error_code: str = "BOOKING_NOT_FOUND"


class InvalidStateTransitionError(ConflictError):
    """
    The requested workflow step is not allowed from the booking's state.

    Example:
        raise InvalidStateTransitionError(
            "Cannot approve a cancelled booking",
            details={"booking_id": str(booking.id), "status": booking.status},
        )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"
