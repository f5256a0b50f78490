"""
Booking request handling.

BookingService turns a patient's request into amounts (via the pricing
resolver and the amount calculator), persists bookings with those amounts
fixed, and drives the approval workflow.

Usage:
    from bookings.services import BookingService

    result = BookingService.quote(hospital_id, "icu", 2)
    if result.success:
        result.data.total_amount

    result = BookingService.create_booking(
        patient=user,
        hospital_id=hospital_id,
        resource_type="icu",
        scheduled_date=date(2026, 1, 10),
        duration_hours=2,
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from bookings.calculator import BookingQuote, compute_amount
from bookings.exceptions import BookingNotFoundError, InvalidStateTransitionError
from bookings.models import Booking
from core.exceptions import BaseApplicationError, InvalidInputError
from core.services import BaseService, ServiceResult
from hospitals.services import PricingService

if TYPE_CHECKING:
    import uuid
    from datetime import date

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """
    Service for booking creation and the approval workflow.

    Methods return ServiceResult; expected failures carry the domain error
    code (PRICING_NOT_FOUND, INVALID_INPUT, BOOKING_NOT_FOUND,
    INVALID_STATE_TRANSITION).
    """

    # Workflow actions exposed to callers, mapped to Booking transitions
    WORKFLOW_ACTIONS = ("approve", "decline", "cancel", "complete")

    @classmethod
    def get_booking(cls, booking_id: uuid.UUID) -> Booking:
        """
        Fetch a booking by id.

        Raises:
            BookingNotFoundError: If no booking has that id
        """
        try:
            return Booking.objects.get(pk=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFoundError(
                f"Booking {booking_id} not found",
                details={"booking_id": str(booking_id)},
            ) from None

    @classmethod
    def quote(
        cls,
        hospital_id: uuid.UUID,
        resource_type: str,
        duration_hours: int,
    ) -> ServiceResult[BookingQuote]:
        """
        Compute what a booking would cost right now.

        The quote carries the currency and pricing row it was priced from,
        the same values create_booking stores on the booking.

        Args:
            hospital_id: UUID of the hospital
            resource_type: One of ResourceType values
            duration_hours: Whole hours, positive

        Returns:
            ServiceResult with BookingQuote on success
        """
        try:
            rate = PricingService.get_rate(hospital_id, resource_type)
            amount = compute_amount(
                rate.base_rate, duration_hours, rate.service_charge_rate
            )
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Booking quote failed")
        return ServiceResult.success(
            BookingQuote(
                total_amount=amount.total_amount,
                hospital_share=amount.hospital_share,
                service_charge_share=amount.service_charge_share,
                currency=rate.currency,
                pricing_id=rate.pricing_id,
            )
        )

    @classmethod
    def create_booking(
        cls,
        patient,
        hospital_id: uuid.UUID,
        resource_type: str,
        scheduled_date: date,
        duration_hours: int,
        notes: str = "",
    ) -> ServiceResult[Booking]:
        """
        Create a pending, unpaid booking priced at the current rate.

        The amounts stored on the booking are never recomputed, even if the
        hospital changes its pricing afterwards.

        Args:
            patient: User making the request
            hospital_id: UUID of the hospital
            resource_type: One of ResourceType values
            scheduled_date: Day the resource is needed (today or later)
            duration_hours: Whole hours, positive
            notes: Free text from the patient

        Returns:
            ServiceResult with the created Booking on success
        """
        try:
            if scheduled_date < timezone.localdate():
                raise InvalidInputError(
                    "Bookings cannot be scheduled in the past",
                    details={"scheduled_date": scheduled_date.isoformat()},
                )
            rate = PricingService.get_rate(hospital_id, resource_type)
            amount = compute_amount(
                rate.base_rate, duration_hours, rate.service_charge_rate
            )
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Booking creation failed")

        booking = Booking.objects.create(
            patient=patient,
            hospital_id=hospital_id,
            resource_type=resource_type,
            scheduled_date=scheduled_date,
            duration_hours=duration_hours,
            notes=notes,
            total_amount=amount.total_amount,
            hospital_share=amount.hospital_share,
            service_charge_share=amount.service_charge_share,
            currency=rate.currency,
            pricing_id=rate.pricing_id,
        )

        logger.info(
            "Booking created",
            extra={
                "booking_id": str(booking.id),
                "hospital_id": str(hospital_id),
                "resource_type": resource_type,
                "total_amount": amount.total_amount,
                "hospital_share": amount.hospital_share,
                "service_charge_share": amount.service_charge_share,
            },
        )
        return ServiceResult.success(booking)

    @classmethod
    def approve(cls, booking_id: uuid.UUID) -> ServiceResult[Booking]:
        """pending -> approved"""
        return cls._apply_transition(booking_id, "approve")

    @classmethod
    def decline(cls, booking_id: uuid.UUID) -> ServiceResult[Booking]:
        """pending -> declined"""
        return cls._apply_transition(booking_id, "decline")

    @classmethod
    def cancel(cls, booking_id: uuid.UUID) -> ServiceResult[Booking]:
        """pending/approved -> cancelled"""
        return cls._apply_transition(booking_id, "cancel")

    @classmethod
    def complete(cls, booking_id: uuid.UUID) -> ServiceResult[Booking]:
        """approved -> completed"""
        return cls._apply_transition(booking_id, "complete")

    @classmethod
    def _apply_transition(cls, booking_id: uuid.UUID, action: str) -> ServiceResult:
        """Run one workflow transition under a row lock."""
        try:
            with transaction.atomic():
                try:
                    booking = Booking.objects.select_for_update().get(pk=booking_id)
                except Booking.DoesNotExist:
                    raise BookingNotFoundError(
                        f"Booking {booking_id} not found",
                        details={"booking_id": str(booking_id)},
                    ) from None

                previous_status = booking.status
                try:
                    getattr(booking, action)()
                except TransitionNotAllowed:
                    raise InvalidStateTransitionError(
                        f"Cannot {action} a booking that is {booking.status}",
                        details={
                            "booking_id": str(booking_id),
                            "status": booking.status,
                            "action": action,
                        },
                    ) from None
                booking.save(update_fields=["status", "updated_at"])
        except BaseApplicationError as e:
            return cls.handle_exception(e, f"Booking {action} failed")

        logger.info(
            "Booking status changed",
            extra={
                "booking_id": str(booking_id),
                "from_status": previous_status,
                "to_status": booking.status,
            },
        )
        return ServiceResult.success(booking)
