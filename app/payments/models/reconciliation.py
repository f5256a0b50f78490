"""
Reconciliation models for tracking runs, discrepancies and corrections.

This module provides models for persisting reconciliation history:
- ReconciliationRun: Tracks each execution of the full reconciliation pass
- DiscrepancyAlert: One account whose cached balance disagreed with its
  transaction history, queued for an operator
- BalanceCorrection: The audited admin action that resets a cached balance

Reconciliation never changes a balance on its own. An operator reviews the
alert and, if the transaction history is right, records a BalanceCorrection.

Usage:
    from payments.models import DiscrepancyAlert

    DiscrepancyAlert.objects.filter(resolved=False, severity="high")
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class ReconciliationRunStatus(models.TextChoices):
    """Status of a reconciliation run."""

    RUNNING = "running", "Running"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class AlertSeverity(models.TextChoices):
    """How urgently an operator should look at a discrepancy."""

    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class ReconciliationRun(UUIDPrimaryKeyMixin, BaseModel):
    """
    Tracks a reconciliation run execution.

    The reconciliation service creates a run at the start, fills in the
    counters and ledger totals as it goes, and marks it completed or failed
    at the end.

    Fields:
        started_at / completed_at: Run window
        status: running, completed or failed
        accounts_checked: Accounts compared
        discrepancies_found: Accounts whose balances disagreed
        computed_total: Sum of all recomputed balances (zero when closed)
        stored_total: Sum of all cached balances (zero when closed)
        error_message: Why the run failed
    """

    started_at = models.DateTimeField(
        help_text="When this reconciliation run started",
    )
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When this reconciliation run completed (or failed)",
    )
    status = models.CharField(
        max_length=20,
        choices=ReconciliationRunStatus.choices,
        default=ReconciliationRunStatus.RUNNING,
        db_index=True,
        help_text="Current status of this reconciliation run",
    )
    accounts_checked = models.PositiveIntegerField(
        default=0,
        help_text="Number of ledger accounts compared",
    )
    discrepancies_found = models.PositiveIntegerField(
        default=0,
        help_text="Number of accounts with a balance discrepancy",
    )
    computed_total = models.BigIntegerField(
        default=0,
        help_text="Sum of balances recomputed from transactions",
    )
    stored_total = models.BigIntegerField(
        default=0,
        help_text="Sum of cached account balances",
    )
    error_message = models.TextField(
        blank=True,
        help_text="Error message if the run failed",
    )

    class Meta:
        indexes = [
            models.Index(fields=["status", "started_at"], name="recon_run_status_idx"),
        ]
        ordering = ["-started_at"]

    def __str__(self) -> str:
        return f"ReconciliationRun({self.id}, {self.status}, {self.started_at})"

    @property
    def duration_seconds(self) -> float | None:
        """Calculate run duration in seconds, or None if not complete."""
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    @property
    def ledger_closed(self) -> bool:
        return self.computed_total == 0 and self.stored_total == 0


class DiscrepancyAlert(UUIDPrimaryKeyMixin, BaseModel):
    """
    An account whose cached balance disagreed with its transactions.

    Alerts form the review queue for operators. Resolving an alert does not
    touch the balance; that is BalanceCorrection's job.

    Fields:
        run: The reconciliation run that raised the alert
        account: The ledger account
        stored_balance / computed_balance: Values at detection time
        discrepancy: stored_balance - computed_balance
        severity: HIGH when |discrepancy| exceeds the configured threshold
        resolved / resolved_at / resolved_by / resolution_notes: Review outcome
    """

    run = models.ForeignKey(
        ReconciliationRun,
        on_delete=models.CASCADE,
        related_name="alerts",
        help_text="The reconciliation run that raised this alert",
    )
    account = models.ForeignKey(
        "payments.LedgerAccount",
        on_delete=models.PROTECT,
        related_name="discrepancy_alerts",
        help_text="Account whose balances disagreed",
    )
    stored_balance = models.BigIntegerField(
        help_text="Cached balance when the discrepancy was detected",
    )
    computed_balance = models.BigIntegerField(
        help_text="Balance recomputed from transactions",
    )
    discrepancy = models.BigIntegerField(
        help_text="stored_balance - computed_balance",
    )
    severity = models.CharField(
        max_length=10,
        choices=AlertSeverity.choices,
        db_index=True,
        help_text="Review priority",
    )
    resolved = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether an operator has closed this alert",
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Operator who closed this alert",
    )
    resolution_notes = models.TextField(
        blank=True,
        help_text="What the operator found and did",
    )

    class Meta:
        indexes = [
            models.Index(fields=["resolved", "severity"], name="recon_alert_queue_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return (
            f"DiscrepancyAlert({self.account_id}, {self.discrepancy}, "
            f"{self.severity})"
        )


class BalanceCorrection(UUIDPrimaryKeyMixin, BaseModel):
    """
    Audit record of an administrator resetting a cached balance.

    The cached balance is set to the balance recomputed from transactions;
    the transaction history itself is never edited.

    Fields:
        account: The corrected ledger account
        alert: The alert that prompted the correction (optional)
        original_balance: Cached balance before the correction
        corrected_balance: Recomputed balance written to the account
        adjustment: corrected_balance - original_balance
        reason / evidence: Operator's justification
        corrected_by: Administrator who made the change
    """

    account = models.ForeignKey(
        "payments.LedgerAccount",
        on_delete=models.PROTECT,
        related_name="balance_corrections",
        help_text="Corrected ledger account",
    )
    alert = models.ForeignKey(
        DiscrepancyAlert,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="corrections",
        help_text="Alert that prompted this correction",
    )
    original_balance = models.BigIntegerField(
        help_text="Cached balance before the correction",
    )
    corrected_balance = models.BigIntegerField(
        help_text="Balance written by the correction",
    )
    adjustment = models.BigIntegerField(
        help_text="corrected_balance - original_balance",
    )
    reason = models.TextField(
        help_text="Why the balance was corrected",
    )
    evidence = models.TextField(
        blank=True,
        help_text="References supporting the correction",
    )
    corrected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Administrator who made the correction",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"BalanceCorrection({self.account_id}, {self.adjustment:+d})"
