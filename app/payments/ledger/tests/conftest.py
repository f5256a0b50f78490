"""
Pytest fixtures for ledger tests.

Sections:
    - Booking Fixtures: Bookings in payable and non-payable states
    - Account Fixtures: The three accounts a booking payment touches
"""

import pytest

from bookings.states import BookingStatus
from bookings.tests.factories import BookingFactory
from payments.ledger.services import LedgerService


# ==========================================================================
# Booking Fixtures
# ==========================================================================


@pytest.fixture
def booking(db, user, hospital_id):
    """Pending, unpaid bed booking: 120 total, 84 hospital, 36 platform."""
    return BookingFactory(patient=user, hospital_id=hospital_id)


@pytest.fixture
def icu_booking(db, user, hospital_id):
    """Approved two-hour ICU booking: 1200 total, 840 hospital, 360 platform."""
    return BookingFactory(
        patient=user,
        hospital_id=hospital_id,
        resource_type="icu",
        duration_hours=2,
        status=BookingStatus.APPROVED,
        total_amount=1200,
        hospital_share=840,
        service_charge_share=360,
    )


# ==========================================================================
# Account Fixtures
# ==========================================================================


@pytest.fixture
def hospital_account(db, hospital_id):
    """Revenue account of the hospital_id fixture."""
    return LedgerService.get_hospital_account(hospital_id)


@pytest.fixture
def platform_account(db):
    """Platform service charge account."""
    return LedgerService.get_platform_account()


@pytest.fixture
def payer_account(db):
    """External payments clearing account (may go negative)."""
    return LedgerService.get_payer_account()


@pytest.fixture
def pay(hospital_account, platform_account, payer_account):
    """
    Apply a booking's own amounts through LedgerService.

    Usage:
        application = pay(booking)
    """

    def _pay(booking, **overrides):
        params = {
            "booking_id": booking.id,
            "amount": booking.total_amount,
            "hospital_account_id": hospital_account.id,
            "admin_account_id": platform_account.id,
            "hospital_share": booking.hospital_share,
            "service_charge_share": booking.service_charge_share,
            "payer_account_id": payer_account.id,
        }
        params.update(overrides)
        return LedgerService.apply_payment(**params)

    return _pay
