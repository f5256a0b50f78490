"""
Tests for payment and ledger API views.
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from bookings.tests.factories import BookingFactory
from payments.ledger.services import LedgerService
from payments.models import BalanceCorrection, ReconciliationRun
from payments.services import ReconciliationService
from payments.tests.factories import (
    DiscrepancyAlertFactory,
    ReconciliationRunFactory,
)


@pytest.mark.django_db
class TestBookingPaymentView:
    """Tests for POST /api/v1/bookings/{id}/pay/."""

    def url(self, booking_id):
        return reverse("bookings:booking-pay", args=[booking_id])

    def test_patient_pays(self, authenticated_client, booking):
        response = authenticated_client.post(
            self.url(booking.id), {"amount": 120}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["hospital_share"] == 84
        assert response.data["service_charge_share"] == 36
        assert response.data["refunded_at"] is None

    def test_staff_can_pay(self, staff_client, booking):
        response = staff_client.post(
            self.url(booking.id), {"amount": 120}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED

    def test_other_patient_is_forbidden(self, authenticated_client):
        other = BookingFactory()

        response = authenticated_client.post(
            self.url(other.id), {"amount": 120}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_wrong_amount_is_400(self, authenticated_client, booking):
        response = authenticated_client.post(
            self.url(booking.id), {"amount": 100}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_INPUT"

    def test_missing_amount_is_400(self, authenticated_client, booking):
        response = authenticated_client.post(self.url(booking.id), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_second_payment_is_409(self, authenticated_client, paid_booking):
        response = authenticated_client.post(
            self.url(paid_booking.id), {"amount": 120}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "DUPLICATE_PAYMENT"

    def test_unknown_booking_is_404(self, authenticated_client):
        response = authenticated_client.post(
            self.url(uuid.uuid4()), {"amount": 120}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_storage_failure_is_503(self, authenticated_client, booking):
        with patch.object(
            LedgerService,
            "_post_transaction",
            side_effect=DatabaseError("connection reset"),
        ):
            response = authenticated_client.post(
                self.url(booking.id), {"amount": 120}, format="json"
            )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["error_code"] == "PERSISTENCE_ERROR"

    def test_requires_authentication(self, api_client, booking):
        response = api_client.post(self.url(booking.id), {"amount": 120})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestBookingRefundView:
    """Tests for POST /api/v1/bookings/{id}/refund/."""

    def url(self, booking_id):
        return reverse("bookings:booking-refund", args=[booking_id])

    def test_staff_refunds(self, staff_client, paid_booking):
        response = staff_client.post(self.url(paid_booking.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["refunded_at"] is not None

    def test_patient_cannot_refund(self, authenticated_client, paid_booking):
        response = authenticated_client.post(self.url(paid_booking.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unpaid_booking_is_404(self, staff_client, booking):
        response = staff_client.post(self.url(booking.id))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "PAYMENT_NOT_FOUND"

    def test_second_refund_is_409(self, staff_client, paid_booking):
        staff_client.post(self.url(paid_booking.id))

        response = staff_client.post(self.url(paid_booking.id))

        assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
class TestLedgerAccountViews:
    def test_account_detail(self, staff_client, paid_booking, hospital_account):
        response = staff_client.get(
            reverse("payments:account-detail", args=[hospital_account.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["balance"] == 84
        assert response.data["type"] == "hospital_revenue"

    def test_account_detail_requires_staff(
        self, authenticated_client, hospital_account
    ):
        response = authenticated_client.get(
            reverse("payments:account-detail", args=[hospital_account.id])
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_account_is_404(self, staff_client):
        response = staff_client.get(
            reverse("payments:account-detail", args=[uuid.uuid4()])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "ACCOUNT_NOT_FOUND"

    def test_transactions(self, staff_client, paid_booking, payer_account):
        response = staff_client.get(
            reverse("payments:account-transactions", args=[payer_account.id]),
            {"limit": 1},
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]["kind"] == "payment"

    def test_transactions_bad_paging_is_400(self, staff_client, payer_account):
        response = staff_client.get(
            reverse("payments:account-transactions", args=[payer_account.id]),
            {"limit": "many"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reconcile(self, staff_client, paid_booking, hospital_account):
        response = staff_client.post(
            reverse("payments:account-reconcile", args=[hospital_account.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_balanced"] is True
        assert response.data["computed_balance"] == 84

    def test_correct_balance(
        self, staff_client, paid_booking, hospital_account, corrupt_balance
    ):
        corrupt_balance(hospital_account, 70)

        response = staff_client.post(
            reverse("payments:account-correct", args=[hospital_account.id]),
            {"reason": "Cache drift", "evidence": "INC-7"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["adjustment"] == 14
        assert LedgerService.get_balance(hospital_account.id).minor_units == 84

    def test_correct_balance_rejects_foreign_alert(
        self, staff_client, paid_booking, hospital_account, platform_account
    ):
        alert = DiscrepancyAlertFactory(account=platform_account)

        response = staff_client.post(
            reverse("payments:account-correct", args=[hospital_account.id]),
            {"reason": "Cache drift", "alert_id": str(alert.id)},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_INPUT"
        alert.refresh_from_db()
        assert alert.resolved is False

    def test_correction_history(
        self, staff_client, paid_booking, hospital_account, staff_user
    ):
        ReconciliationService.correct_balance(
            hospital_account.id, corrected_by=staff_user, reason="First audit"
        )
        ReconciliationService.correct_balance(
            hospital_account.id, corrected_by=staff_user, reason="Second audit"
        )

        response = staff_client.get(
            reverse("payments:account-corrections", args=[hospital_account.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert [c["reason"] for c in response.data] == [
            "Second audit",
            "First audit",
        ]

    def test_correction_history_unknown_account_is_404(self, staff_client):
        response = staff_client.get(
            reverse("payments:account-corrections", args=[uuid.uuid4()])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert not BalanceCorrection.objects.exists()

    def test_correct_balance_requires_reason(self, staff_client, hospital_account):
        response = staff_client.post(
            reverse("payments:account-correct", args=[hospital_account.id]),
            {},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestDiscrepancyAlertViews:
    def test_lists_open_alerts(self, staff_client, hospital_account):
        DiscrepancyAlertFactory(account=hospital_account)
        DiscrepancyAlertFactory(account=hospital_account, resolved=True)

        response = staff_client.get(reverse("payments:alert-list"))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_resolve(self, staff_client, hospital_account):
        alert = DiscrepancyAlertFactory(account=hospital_account)

        response = staff_client.post(
            reverse("payments:alert-resolve", args=[alert.id]),
            {"notes": "Investigated"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["resolved"] is True

    def test_resolve_unknown_alert_is_404(self, staff_client):
        response = staff_client.post(
            reverse("payments:alert-resolve", args=[uuid.uuid4()])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_resolve_twice_is_409(self, staff_client, hospital_account):
        alert = DiscrepancyAlertFactory(account=hospital_account)
        url = reverse("payments:alert-resolve", args=[alert.id])
        staff_client.post(url, {"notes": "Investigated"}, format="json")

        response = staff_client.post(url, {"notes": "Again"}, format="json")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "ALERT_ALREADY_RESOLVED"


@pytest.mark.django_db
class TestReconciliationRunViews:
    """Tests for /api/v1/payments/reconciliation/runs/."""

    def url(self):
        return reverse("payments:reconciliation-runs")

    def test_trigger_run(self, staff_client, paid_booking, mock_redis):
        response = staff_client.post(self.url())

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == "completed"
        assert response.data["accounts_checked"] == 3
        assert response.data["ledger_closed"] is True
        assert ReconciliationRun.objects.filter(pk=response.data["id"]).exists()

    def test_trigger_while_running_is_409(self, staff_client, mock_redis, settings):
        settings.RECONCILIATION_LOCK_TIMEOUT_SECONDS = 0
        mock_redis.set.return_value = False

        response = staff_client.post(self.url())

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "RECONCILIATION_IN_PROGRESS"

    def test_failed_run_is_503(self, staff_client, paid_booking, mock_redis):
        with patch.object(
            ReconciliationService,
            "check_ledger_closed",
            side_effect=DatabaseError("statement timeout"),
        ):
            response = staff_client.post(self.url())

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["error_code"] == "RECONCILIATION_FAILED"

    def test_history_newest_first(self, staff_client):
        now = timezone.now()
        older = ReconciliationRunFactory(started_at=now - timedelta(days=1))
        newer = ReconciliationRunFactory(started_at=now)

        response = staff_client.get(self.url(), {"limit": 5})

        assert response.status_code == status.HTTP_200_OK
        assert [r["id"] for r in response.data] == [str(newer.id), str(older.id)]

    def test_history_limit(self, staff_client):
        ReconciliationRunFactory.create_batch(3)

        response = staff_client.get(self.url(), {"limit": 2})

        assert len(response.data) == 2

    def test_history_bad_limit_is_400(self, staff_client):
        response = staff_client.get(self.url(), {"limit": "0"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_requires_staff(self, authenticated_client):
        forbidden = status.HTTP_403_FORBIDDEN

        assert authenticated_client.get(self.url()).status_code == forbidden
        assert authenticated_client.post(self.url()).status_code == forbidden
