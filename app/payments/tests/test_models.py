"""
Tests for reconciliation models.
"""

from datetime import timedelta

from django.utils import timezone

from payments.models import BalanceCorrection, ReconciliationRun
from payments.tests.factories import DiscrepancyAlertFactory, ReconciliationRunFactory


class TestReconciliationRun:
    def test_duration(self, db):
        started = timezone.now()
        run = ReconciliationRunFactory(
            started_at=started, completed_at=started + timedelta(seconds=90)
        )

        assert run.duration_seconds == 90

    def test_duration_of_running_run_is_none(self, db):
        run = ReconciliationRun.objects.create(started_at=timezone.now())

        assert run.status == "running"
        assert run.duration_seconds is None

    def test_ledger_closed(self, db):
        assert ReconciliationRunFactory().ledger_closed is True
        assert ReconciliationRunFactory(stored_total=5).ledger_closed is False


class TestDiscrepancyAlert:
    def test_stored_balance_follows_discrepancy(self, hospital_account):
        alert = DiscrepancyAlertFactory(
            account=hospital_account, computed_balance=84, discrepancy=-4
        )

        assert alert.stored_balance == 80
        assert alert.resolved is False


class TestBalanceCorrection:
    def test_str_shows_signed_adjustment(self, hospital_account, staff_user):
        correction = BalanceCorrection.objects.create(
            account=hospital_account,
            original_balance=80,
            corrected_balance=84,
            adjustment=4,
            reason="Cache drift",
            corrected_by=staff_user,
        )

        assert str(correction).endswith("+4)")
