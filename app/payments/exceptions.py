"""
Payment-specific exceptions for booking payments and reconciliation.

Exception Hierarchy:
    PaymentNotFoundError - Refund requested for a booking with no payment
                           (inherits NotFoundError)
    AlertNotFoundError - Unknown reconciliation alert (inherits NotFoundError)
    AlertAlreadyResolvedError - Alert was closed earlier (inherits ConflictError)
    DuplicatePaymentError - Booking already paid (inherits ConflictError)
    DuplicateRefundError - Payment already refunded (inherits ConflictError)
    LockAcquisitionError - Distributed lock timeout (inherits ConflictError)
    └── ReconciliationLockError - Another reconciliation run holds the lock
    ReconciliationError - A reconciliation run failed part-way

Usage:
    from payments.exceptions import DuplicatePaymentError

    if booking.payment_status != PaymentStatus.UNPAID:
        raise DuplicatePaymentError(
            f"Booking {booking.id} is already paid",
            details={"booking_id": str(booking.id)},
        )

    # Distributed lock timeout
    raise LockAcquisitionError(
        "Could not acquire lock for reconciliation:run within 5s",
        details={"key": "lock:reconciliation:run", "timeout": 5},
    )
"""

from __future__ import annotations

from core.exceptions import BaseApplicationError, ConflictError, NotFoundError


class PaymentNotFoundError(NotFoundError):
    """
    Raised when a booking has no recorded payment.

    Refunds require the original payment to exist.
    """

    default_error_code: str = "PAYMENT_NOT_FOUND"


class AlertNotFoundError(NotFoundError):
    """Raised when a reconciliation alert cannot be found."""

    default_error_code: str = "ALERT_NOT_FOUND"


class AlertAlreadyResolvedError(ConflictError):
    """
    Raised when resolving an alert that is already resolved.

    The first resolver and timestamp are kept.
    """

    default_error_code: str = "ALERT_ALREADY_RESOLVED"


class DuplicatePaymentError(ConflictError):
    """
    Raised when a booking already has a payment.

    At most one payment succeeds per booking. Clients that retried after a
    timeout get this error instead of a second credit, so they should
    treat it as "already paid" and not retry again.

    Example:
        raise DuplicatePaymentError(
            f"Booking {booking_id} is already paid",
            details={"booking_id": str(booking_id), "payment_status": "paid"},
        )
    """

    default_error_code: str = "DUPLICATE_PAYMENT"


class DuplicateRefundError(ConflictError):
    """Raised when a booking's payment has already been refunded."""

    default_error_code: str = "DUPLICATE_REFUND"


class LockAcquisitionError(ConflictError):
    """
    Raised when a distributed lock cannot be acquired.

    This exception indicates that another process holds the lock
    and it couldn't be acquired within the timeout period.

    Note:
        This exception inherits from ConflictError (HTTP 409) because
        it represents a resource contention conflict.
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"


class ReconciliationLockError(LockAcquisitionError):
    """
    Raised when another reconciliation run is already in progress.

    The scheduled task treats this as "skipped", not as a failure.
    """

    default_error_code: str = "RECONCILIATION_IN_PROGRESS"


class ReconciliationError(BaseApplicationError):
    """Raised when a reconciliation run fails part-way."""

    default_error_code: str = "RECONCILIATION_FAILED"
