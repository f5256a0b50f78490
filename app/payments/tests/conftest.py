"""
Pytest fixtures for payment tests.

Sections:
    - Redis: Mocked connection for DistributedLock
    - Bookings and Accounts: A payable booking and its ledger accounts
    - Ledger State: A paid booking and a corrupted cached balance
"""

import pytest

from bookings.tests.factories import BookingFactory
from payments.ledger.models import LedgerAccount
from payments.ledger.services import LedgerService
from payments.services import PaymentService


# =============================================================================
# Redis
# =============================================================================


@pytest.fixture
def mock_redis(mocker):
    """
    Mock Redis client for distributed lock tests.

    set() succeeds and the release/extend scripts report ownership.
    """
    mock_client = mocker.MagicMock()
    mock_client.set.return_value = True
    mock_client.eval.return_value = 1

    mocker.patch(
        "payments.locks.get_redis_connection",
        return_value=mock_client,
    )

    return mock_client


# =============================================================================
# Bookings and Accounts
# =============================================================================


@pytest.fixture
def booking(db, user, hospital_id):
    """Pending, unpaid bed booking owned by the user fixture (120 / 84 / 36)."""
    return BookingFactory(patient=user, hospital_id=hospital_id)


@pytest.fixture
def hospital_account(db, hospital_id):
    return LedgerService.get_hospital_account(hospital_id)


@pytest.fixture
def platform_account(db):
    return LedgerService.get_platform_account()


@pytest.fixture
def payer_account(db):
    return LedgerService.get_payer_account()


# =============================================================================
# Ledger State
# =============================================================================


@pytest.fixture
def paid_booking(booking):
    """The booking fixture after its payment was applied."""
    result = PaymentService.submit_payment(booking.id, amount=booking.total_amount)
    assert result.success, result.error
    return booking


@pytest.fixture
def corrupt_balance():
    """
    Overwrite an account's cached balance without a transaction.

    Simulates the drift reconciliation exists to catch.
    """

    def _corrupt(account, balance):
        LedgerAccount.objects.filter(pk=account.pk).update(balance=balance)

    return _corrupt
