"""
State enums for bookings, used with django-fsm.

Booking status:
    pending → approved → completed
    pending → declined
    pending/approved → cancelled

Payment status:
    unpaid → paid → refunded
"""

from django.db import models


class BookingStatus(models.TextChoices):
    """
    Workflow state of a booking request.

    Terminal states: DECLINED, COMPLETED, CANCELLED
    """

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    DECLINED = "declined", "Declined"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    """
    Payment state of a booking.

    The only transitions are UNPAID → PAID and PAID → REFUNDED. A second
    payment of a paid booking is a DuplicatePaymentError, never a transition.
    """

    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"
    REFUNDED = "refunded", "Refunded"


# Bookings in these states may still be paid for
PAYABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)
