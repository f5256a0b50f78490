"""
Booking model for hospital resource requests.

A booking carries two independent django-fsm state machines: the workflow
status (hospital approval) and the payment status (ledger). Amounts are
fixed when the booking is created and never recomputed.

Usage:
    from bookings.models import Booking

    booking.approve()  # pending -> approved
    booking.save()

    booking.mark_paid()  # unpaid -> paid (only called by the ledger)
    booking.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django_fsm import FSMField, transition

from bookings.states import PAYABLE_STATUSES, BookingStatus, PaymentStatus
from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from hospitals.models import ResourceType


class Booking(UUIDPrimaryKeyMixin, BaseModel):
    """
    A patient's request for a hospital resource.

    Status Flow:
        PENDING -> APPROVED -> COMPLETED
        PENDING -> DECLINED
        PENDING/APPROVED -> CANCELLED

    Payment Flow:
        UNPAID -> PAID -> REFUNDED

    Fields:
        patient: User who requested the booking
        hospital_id: UUID of the hospital
        resource_type: bed, icu or operation_theatre
        scheduled_date: Day the resource is needed
        duration_hours: Whole hours booked
        status: Workflow state (FSM)
        payment_status: Payment state (FSM, driven by the ledger)
        total_amount: base_rate * duration_hours, minor units
        hospital_share: Part of the total credited to the hospital
        service_charge_share: Part of the total credited to the platform
        currency: ISO 4217 currency code
        pricing: Pricing row the amounts were computed from
        paid_at / refunded_at: Payment timestamps
        notes: Free text from the patient

    Constraints:
        - total_amount = hospital_share + service_charge_share
        - duration_hours > 0
    """

    # ==========================================================================
    # Request
    # ==========================================================================

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
        help_text="User who requested the booking",
    )
    hospital_id = models.UUIDField(
        db_index=True,
        help_text="UUID of the hospital",
    )
    resource_type = models.CharField(
        max_length=32,
        choices=ResourceType.choices,
        help_text="Requested resource",
    )
    scheduled_date = models.DateField(
        help_text="Day the resource is needed",
    )
    duration_hours = models.PositiveIntegerField(
        help_text="Whole hours booked",
    )
    notes = models.TextField(
        blank=True,
        default="",
        help_text="Free text from the patient",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=BookingStatus.PENDING,
        choices=BookingStatus.choices,
        db_index=True,
        protected=True,
        help_text="Workflow state (managed by FSM)",
    )
    payment_status = FSMField(
        default=PaymentStatus.UNPAID,
        choices=PaymentStatus.choices,
        db_index=True,
        protected=True,
        help_text="Payment state (managed by FSM)",
    )

    # ==========================================================================
    # Amounts (fixed at creation)
    # ==========================================================================

    total_amount = models.PositiveBigIntegerField(
        help_text="Total charge in minor currency units",
    )
    hospital_share = models.PositiveBigIntegerField(
        help_text="Hospital's part of the total",
    )
    service_charge_share = models.PositiveBigIntegerField(
        help_text="Platform service charge part of the total",
    )
    currency = models.CharField(
        max_length=3,
        default="bdt",
        help_text="ISO 4217 currency code",
    )
    pricing = models.ForeignKey(
        "hospitals.HospitalPricing",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
        help_text="Pricing row the amounts were computed from",
    )

    # ==========================================================================
    # Timestamps
    # ==========================================================================

    paid_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(
                    total_amount=F("hospital_share") + F("service_charge_share")
                ),
                name="booking_shares_sum_to_total",
            ),
            models.CheckConstraint(
                condition=Q(duration_hours__gt=0),
                name="booking_duration_positive",
            ),
        ]
        indexes = [
            models.Index(
                fields=["hospital_id", "status"],
                name="booking_hospital_status_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation with id, states and total."""
        return (
            f"Booking({self.id}, {self.status}/{self.payment_status}, "
            f"{self.total_amount} {self.currency.upper()})"
        )

    @property
    def is_payable(self) -> bool:
        """Whether the workflow state still accepts a payment."""
        return self.status in PAYABLE_STATUSES

    # ==========================================================================
    # Workflow Transitions
    # ==========================================================================

    @transition(
        field=status,
        source=BookingStatus.PENDING,
        target=BookingStatus.APPROVED,
    )
    def approve(self):
        """Hospital authority accepts the request."""

    @transition(
        field=status,
        source=BookingStatus.PENDING,
        target=BookingStatus.DECLINED,
    )
    def decline(self):
        """Hospital authority rejects the request."""

    @transition(
        field=status,
        source=[BookingStatus.PENDING, BookingStatus.APPROVED],
        target=BookingStatus.CANCELLED,
    )
    def cancel(self):
        """
        Patient or authority withdraws the booking.

        A paid booking stays paid; the refund is a separate ledger action.
        """

    @transition(
        field=status,
        source=BookingStatus.APPROVED,
        target=BookingStatus.COMPLETED,
    )
    def complete(self):
        """The resource has been used."""

    # ==========================================================================
    # Payment Transitions (called by payments.ledger only)
    # ==========================================================================

    @transition(
        field=payment_status,
        source=PaymentStatus.UNPAID,
        target=PaymentStatus.PAID,
    )
    def mark_paid(self):
        """
        Record that the ledger applied this booking's payment.

        Transition: UNPAID -> PAID
        """
        self.paid_at = timezone.now()

    @transition(
        field=payment_status,
        source=PaymentStatus.PAID,
        target=PaymentStatus.REFUNDED,
    )
    def mark_refunded(self):
        """
        Record that the ledger reversed this booking's payment.

        Transition: PAID -> REFUNDED
        """
        self.refunded_at = timezone.now()
