"""
DRF serializers for payments app.

This module provides serializers for:
- Payment submissions and the resulting BookingPayment
- Ledger accounts and their transaction history
- Reconciliation reports, alerts and balance corrections

Usage:
    serializer = LedgerAccountSerializer(account)
    data = serializer.data
"""

from __future__ import annotations

from rest_framework import serializers

from payments.ledger.models import BookingPayment, LedgerAccount, LedgerTransaction
from payments.models import BalanceCorrection, DiscrepancyAlert, ReconciliationRun


class PaymentRequestSerializer(serializers.Serializer):
    """Request body for paying a booking; amount is in minor units."""

    amount = serializers.IntegerField(min_value=1)


class BookingPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingPayment
        fields = [
            "id",
            "booking",
            "amount",
            "hospital_share",
            "service_charge_share",
            "currency",
            "paid_at",
            "refunded_at",
        ]
        read_only_fields = fields


class LedgerAccountSerializer(serializers.ModelSerializer):
    """
    Ledger account with its cached balance.

    The balance is the cached value; use the reconcile endpoint to compare
    it with the transaction history.
    """

    class Meta:
        model = LedgerAccount
        fields = [
            "id",
            "type",
            "owner_id",
            "currency",
            "balance",
            "allow_negative",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class LedgerTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerTransaction
        fields = [
            "id",
            "booking",
            "from_account",
            "to_account",
            "amount",
            "currency",
            "kind",
            "reverses",
            "idempotency_key",
            "description",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class AccountReconciliationSerializer(serializers.Serializer):
    """Result of reconciling one account."""

    account_id = serializers.UUIDField()
    stored_balance = serializers.IntegerField()
    computed_balance = serializers.IntegerField()
    discrepancy = serializers.IntegerField()
    is_balanced = serializers.BooleanField()


class ReconciliationRunSerializer(serializers.ModelSerializer):
    """Recorded reconciliation run with its counters and ledger totals."""

    ledger_closed = serializers.BooleanField(read_only=True)
    duration_seconds = serializers.FloatField(read_only=True, allow_null=True)

    class Meta:
        model = ReconciliationRun
        fields = [
            "id",
            "status",
            "started_at",
            "completed_at",
            "duration_seconds",
            "accounts_checked",
            "discrepancies_found",
            "computed_total",
            "stored_total",
            "ledger_closed",
            "error_message",
        ]
        read_only_fields = fields


class DiscrepancyAlertSerializer(serializers.ModelSerializer):
    class Meta:
        model = DiscrepancyAlert
        fields = [
            "id",
            "run",
            "account",
            "stored_balance",
            "computed_balance",
            "discrepancy",
            "severity",
            "resolved",
            "resolved_at",
            "resolution_notes",
            "created_at",
        ]
        read_only_fields = fields


class ResolveAlertSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BalanceCorrectionRequestSerializer(serializers.Serializer):
    """Request body for correcting an account's cached balance."""

    reason = serializers.CharField()
    evidence = serializers.CharField(required=False, allow_blank=True, default="")
    alert_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class BalanceCorrectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = BalanceCorrection
        fields = [
            "id",
            "account",
            "alert",
            "original_balance",
            "corrected_balance",
            "adjustment",
            "reason",
            "evidence",
            "corrected_by",
            "created_at",
        ]
        read_only_fields = fields
