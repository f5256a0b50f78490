"""
Factory Boy factories for bookings.

Usage:
    from bookings.tests.factories import BookingFactory

    booking = BookingFactory()  # 120 total: 84 hospital, 36 service charge
    paid = BookingFactory(payment_status=PaymentStatus.PAID)
"""

import uuid
from datetime import timedelta

import factory
from django.utils import timezone

from bookings.models import Booking
from bookings.states import BookingStatus, PaymentStatus
from core.tests.factories import UserFactory
from hospitals.models import ResourceType


class BookingFactory(factory.django.DjangoModelFactory):
    """
    Factory for Booking.

    Defaults to a pending, unpaid one-hour bed booking priced at 120 with a
    30% service charge. FSM states can be set at creation time only.
    """

    class Meta:
        model = Booking
        skip_postgeneration_save = True

    patient = factory.SubFactory(UserFactory)
    hospital_id = factory.LazyFunction(uuid.uuid4)
    resource_type = ResourceType.BED
    scheduled_date = factory.LazyFunction(
        lambda: timezone.localdate() + timedelta(days=1)
    )
    duration_hours = 1
    status = BookingStatus.PENDING
    payment_status = PaymentStatus.UNPAID
    total_amount = 120
    hospital_share = 84
    service_charge_share = 36
    currency = "bdt"
