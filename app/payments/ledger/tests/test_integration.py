"""
End-to-end tests from hospital pricing to a reconciled ledger.

These go through the public services only: PricingService sets prices,
BookingService fixes the amounts, PaymentService moves the money and
ReconciliationService checks that every cached balance still matches
the transaction history.
"""

import random
import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from bookings.services import BookingService
from hospitals.models import ResourceType
from hospitals.services import PricingService
from payments.ledger.models import LedgerAccount
from payments.ledger.services import LedgerService
from payments.services import PaymentService, ReconciliationService


def set_price(hospital_id, resource_type, base_rate, rate="0.30"):
    return PricingService.update_pricing(
        hospital_id=hospital_id,
        resource_type=resource_type,
        base_rate=base_rate,
        service_charge_rate=Decimal(rate),
    )


def book(patient, hospital_id, resource_type, hours):
    result = BookingService.create_booking(
        patient=patient,
        hospital_id=hospital_id,
        resource_type=resource_type,
        scheduled_date=timezone.localdate() + timedelta(days=1),
        duration_hours=hours,
    )
    assert result.success, result.error
    return result.data


def assert_ledger_reconciles():
    for account in LedgerAccount.objects.all():
        report = ReconciliationService.reconcile(account.id)
        assert report.is_balanced, report
    totals = ReconciliationService.check_ledger_closed()
    assert totals.is_closed, totals


class TestBookingJourney:
    def test_bed_booking_paid_and_reconciled(self, user, hospital_id):
        set_price(hospital_id, ResourceType.BED, 120)
        booking = book(user, hospital_id, ResourceType.BED, 1)

        result = PaymentService.submit_payment(booking.id, amount=120)

        assert result.success
        hospital = LedgerService.get_hospital_account(hospital_id)
        platform = LedgerService.get_platform_account()
        assert LedgerService.get_balance(hospital.id).minor_units == 84
        assert LedgerService.get_balance(platform.id).minor_units == 36
        assert_ledger_reconciles()

    def test_icu_booking_paid_then_refunded(self, user, hospital_id):
        set_price(hospital_id, ResourceType.ICU, 600)
        booking = book(user, hospital_id, ResourceType.ICU, 2)
        assert (booking.total_amount, booking.hospital_share) == (1200, 840)

        assert PaymentService.submit_payment(booking.id, amount=1200).success
        assert PaymentService.submit_refund(booking.id).success

        for account in LedgerAccount.objects.all():
            assert account.balance == 0
        assert_ledger_reconciles()

    def test_price_change_after_booking_does_not_change_amount(
        self, user, hospital_id
    ):
        set_price(hospital_id, ResourceType.BED, 120)
        booking = book(user, hospital_id, ResourceType.BED, 1)
        set_price(hospital_id, ResourceType.BED, 500)

        stale = PaymentService.submit_payment(booking.id, amount=500)
        paid = PaymentService.submit_payment(booking.id, amount=120)

        assert stale.error_code == "INVALID_INPUT"
        assert paid.success
        assert paid.data.payment.hospital_share == 84

    def test_reversal_keeps_ledger_reconciled(self, user, hospital_id):
        set_price(hospital_id, ResourceType.OPERATION_THEATRE, 999, rate="0.125")
        booking = book(user, hospital_id, ResourceType.OPERATION_THEATRE, 1)
        application = PaymentService.submit_payment(booking.id, amount=999).data

        # 999 * 0.125 = 124.875 -> 125 to the platform
        assert application.payment.service_charge_share == 125
        LedgerService.reverse_transaction(
            application.transactions[0].id, reason="Posted in error"
        )

        assert_ledger_reconciles()


class TestRandomSequences:
    """Random payments and refunds always leave a closed, reconciled ledger."""

    @pytest.mark.parametrize("seed", [7, 42, 2024])
    def test_payments_and_refunds_reconcile(self, user, seed):
        rng = random.Random(seed)
        hospitals = [uuid.uuid4() for _ in range(3)]
        for hospital_id in hospitals:
            for resource_type in ResourceType.values:
                set_price(
                    hospital_id,
                    resource_type,
                    rng.randint(1, 5000),
                    rate=str(Decimal(rng.randint(0, 100)) / 100),
                )

        expected = {hospital_id: 0 for hospital_id in hospitals}
        platform_expected = 0
        for _ in range(25):
            hospital_id = rng.choice(hospitals)
            booking = book(
                user,
                hospital_id,
                rng.choice(ResourceType.values),
                rng.randint(1, 12),
            )
            result = PaymentService.submit_payment(
                booking.id, amount=booking.total_amount
            )
            assert result.success, result.error
            expected[hospital_id] += booking.hospital_share
            platform_expected += booking.service_charge_share

            if rng.random() < 0.4:
                assert PaymentService.submit_refund(booking.id).success
                expected[hospital_id] -= booking.hospital_share
                platform_expected -= booking.service_charge_share

        for hospital_id, balance in expected.items():
            account = LedgerService.get_hospital_account(hospital_id)
            assert LedgerService.get_balance(account.id).minor_units == balance
        platform = LedgerService.get_platform_account()
        assert LedgerService.get_balance(platform.id).minor_units == platform_expected
        assert_ledger_reconciles()
