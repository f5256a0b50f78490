"""
Pytest fixtures for booking tests.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from bookings.states import BookingStatus
from bookings.tests.factories import BookingFactory


@pytest.fixture
def tomorrow():
    return timezone.localdate() + timedelta(days=1)


@pytest.fixture
def pending_booking(db, user):
    """Pending, unpaid booking owned by the user fixture."""
    return BookingFactory(patient=user)


@pytest.fixture
def approved_booking(db, user):
    """Approved, unpaid booking owned by the user fixture."""
    return BookingFactory(patient=user, status=BookingStatus.APPROVED)
