"""
Tests for the Booking model: constraints and django-fsm transitions.
"""

import pytest
from django.db import IntegrityError, transaction
from django_fsm import TransitionNotAllowed

from bookings.states import BookingStatus, PaymentStatus
from bookings.tests.factories import BookingFactory


@pytest.mark.django_db
class TestBookingConstraints:
    """The database enforces the amount invariant."""

    def test_shares_must_sum_to_total(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            BookingFactory(total_amount=120, hospital_share=84, service_charge_share=30)

    def test_duration_must_be_positive(self):
        with pytest.raises(IntegrityError), transaction.atomic():
            BookingFactory(duration_hours=0)


@pytest.mark.django_db
class TestBookingStatusTransitions:
    """Workflow transitions."""

    def test_pending_to_approved(self, pending_booking):
        pending_booking.approve()
        pending_booking.save()

        assert pending_booking.status == BookingStatus.APPROVED

    def test_pending_to_declined(self, pending_booking):
        pending_booking.decline()

        assert pending_booking.status == BookingStatus.DECLINED

    @pytest.mark.parametrize(
        "status", [BookingStatus.PENDING, BookingStatus.APPROVED]
    )
    def test_cancel_from_open_states(self, status):
        booking = BookingFactory(status=status)

        booking.cancel()

        assert booking.status == BookingStatus.CANCELLED

    def test_approved_to_completed(self, approved_booking):
        approved_booking.complete()

        assert approved_booking.status == BookingStatus.COMPLETED

    def test_cannot_complete_pending(self, pending_booking):
        with pytest.raises(TransitionNotAllowed):
            pending_booking.complete()

    @pytest.mark.parametrize(
        "status",
        [BookingStatus.DECLINED, BookingStatus.COMPLETED, BookingStatus.CANCELLED],
    )
    def test_terminal_states_are_final(self, status):
        booking = BookingFactory(status=status)

        for action in (booking.approve, booking.decline, booking.cancel):
            with pytest.raises(TransitionNotAllowed):
                action()

    def test_status_cannot_be_assigned_directly(self, pending_booking):
        with pytest.raises(AttributeError):
            pending_booking.status = BookingStatus.APPROVED


@pytest.mark.django_db
class TestBookingPaymentTransitions:
    """Payment status: unpaid -> paid -> refunded only."""

    def test_unpaid_to_paid_sets_paid_at(self, pending_booking):
        pending_booking.mark_paid()

        assert pending_booking.payment_status == PaymentStatus.PAID
        assert pending_booking.paid_at is not None

    def test_paid_to_refunded_sets_refunded_at(self):
        booking = BookingFactory(payment_status=PaymentStatus.PAID)

        booking.mark_refunded()

        assert booking.payment_status == PaymentStatus.REFUNDED
        assert booking.refunded_at is not None

    def test_paid_cannot_be_paid_again(self):
        booking = BookingFactory(payment_status=PaymentStatus.PAID)

        with pytest.raises(TransitionNotAllowed):
            booking.mark_paid()

    def test_unpaid_cannot_be_refunded(self, pending_booking):
        with pytest.raises(TransitionNotAllowed):
            pending_booking.mark_refunded()

    def test_refunded_is_final(self):
        booking = BookingFactory(payment_status=PaymentStatus.REFUNDED)

        with pytest.raises(TransitionNotAllowed):
            booking.mark_paid()
        with pytest.raises(TransitionNotAllowed):
            booking.mark_refunded()

    @pytest.mark.parametrize(
        "status, payable",
        [
            (BookingStatus.PENDING, True),
            (BookingStatus.APPROVED, True),
            (BookingStatus.DECLINED, False),
            (BookingStatus.CANCELLED, False),
            (BookingStatus.COMPLETED, False),
        ],
    )
    def test_is_payable(self, status, payable):
        assert BookingFactory.build(status=status).is_payable is payable
