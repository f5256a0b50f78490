"""
Reconciliation of cached balances against the transaction history.

Transactions are the source of truth; each LedgerAccount.balance is a cache
maintained by LedgerService. This service recomputes every account's
balance from its transactions, reports discrepancies and raises alerts for
operators. It never changes a balance on its own: correct_balance() is the
separate, audited admin action.

Usage:
    from payments.services.reconciliation_service import ReconciliationService

    # One account, on demand
    report = ReconciliationService.reconcile(account_id)
    report.discrepancy  # stored_balance - computed_balance

    # Whole ledger (daily Celery beat task)
    result = ReconciliationService.run_reconciliation()
    if result.success:
        result.data.discrepancies_found
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.exceptions import InvalidInputError
from core.services import BaseService, ServiceResult
from payments.exceptions import (
    AlertAlreadyResolvedError,
    AlertNotFoundError,
    LockAcquisitionError,
    ReconciliationError,
    ReconciliationLockError,
)
from payments.ledger.exceptions import AccountNotFound
from payments.ledger.models import LedgerAccount, LedgerTransaction
from payments.ledger.types import (
    AccountReconciliation,
    LedgerTotals,
    ReconciliationRunResult,
)
from payments.locks import DistributedLock
from payments.models.reconciliation import (
    AlertSeverity,
    BalanceCorrection,
    DiscrepancyAlert,
    ReconciliationRun,
    ReconciliationRunStatus,
)

if TYPE_CHECKING:
    import uuid

logger = logging.getLogger(__name__)

RUN_LOCK_KEY = "reconciliation:run"

# Accounts reconciled between lock TTL refreshes
LOCK_EXTEND_EVERY = 500


class ReconciliationService(BaseService):
    """
    Service for verifying the ledger.

    reconcile() and check_ledger_closed() are reads. run_reconciliation()
    persists a ReconciliationRun and DiscrepancyAlerts. correct_balance()
    is the only method that writes a balance.
    """

    @classmethod
    def reconcile(cls, account_id: uuid.UUID) -> AccountReconciliation:
        """
        Compare one account's cached balance with its transactions.

        The account row is locked while the sum is taken so a concurrent
        posting cannot land between reading the balance and summing the
        transactions.

        Args:
            account_id: UUID of the ledger account

        Returns:
            AccountReconciliation; a non-zero discrepancy is also logged at
            ERROR level

        Raises:
            AccountNotFound: If the account doesn't exist
        """
        with transaction.atomic():
            try:
                account = LedgerAccount.objects.select_for_update().get(pk=account_id)
            except LedgerAccount.DoesNotExist:
                raise AccountNotFound(
                    f"Account {account_id} not found",
                    details={"account_id": str(account_id)},
                ) from None
            report = AccountReconciliation(
                account_id=account.id,
                computed_balance=account.computed_balance(),
                stored_balance=account.balance,
            )

        if not report.is_balanced:
            _log_discrepancy(account, report)
        return report

    @classmethod
    def check_ledger_closed(cls) -> LedgerTotals:
        """
        Sum every account's recomputed and cached balance.

        Every movement debits one account and credits another, so both
        totals are zero unless money was created or destroyed.
        """
        computed = _computed_balances()
        stored_total = LedgerAccount.objects.aggregate(total=Sum("balance"))["total"]
        return LedgerTotals(
            computed_total=sum(computed.values()),
            stored_total=stored_total or 0,
        )

    @classmethod
    def run_reconciliation(cls) -> ServiceResult[ReconciliationRunResult]:
        """
        Reconcile every ledger account.

        Acquires a global distributed lock, records a ReconciliationRun and
        creates one DiscrepancyAlert per account whose balances disagree.
        Severity is HIGH when the absolute discrepancy exceeds
        settings.RECONCILIATION_HIGH_SEVERITY_THRESHOLD.

        Returns:
            ServiceResult containing ReconciliationRunResult

        Raises:
            ReconciliationLockError: If another run is already in progress
            ReconciliationError: If the run failed part-way
        """
        cls.get_logger().info("Starting reconciliation run")

        lock = DistributedLock(
            RUN_LOCK_KEY,
            ttl=settings.RECONCILIATION_LOCK_TTL_SECONDS,
            timeout=settings.RECONCILIATION_LOCK_TIMEOUT_SECONDS,
        )
        try:
            lock.acquire()
        except LockAcquisitionError:
            cls.get_logger().warning(
                "Another reconciliation run is in progress",
                extra={"lock_key": lock.key},
            )
            raise ReconciliationLockError(
                "Another reconciliation run is in progress",
                details={"lock_key": lock.key},
            ) from None

        try:
            return cls._run_with_lock(lock)
        finally:
            lock.release()

    @classmethod
    def _run_with_lock(cls, lock: DistributedLock) -> ServiceResult:
        """Execute the run with the lock already held."""
        started_at = timezone.now()
        run = ReconciliationRun.objects.create(started_at=started_at)
        threshold = settings.RECONCILIATION_HIGH_SEVERITY_THRESHOLD

        alert_ids = []
        accounts_checked = 0
        try:
            for account in LedgerAccount.objects.order_by("id").iterator():
                report = cls.reconcile(account.id)
                accounts_checked += 1
                if accounts_checked % LOCK_EXTEND_EVERY == 0 and not lock.extend():
                    raise LockAcquisitionError(
                        f"Lost lock '{lock.key}' during reconciliation run",
                        details={"key": lock.key},
                    )
                if report.is_balanced:
                    continue

                severity = (
                    AlertSeverity.HIGH
                    if abs(report.discrepancy) > threshold
                    else AlertSeverity.MEDIUM
                )
                alert = DiscrepancyAlert.objects.create(
                    run=run,
                    account=account,
                    stored_balance=report.stored_balance,
                    computed_balance=report.computed_balance,
                    discrepancy=report.discrepancy,
                    severity=severity,
                )
                alert_ids.append(alert.id)

            totals = cls.check_ledger_closed()
        except Exception as e:
            # Redis errors too; a run never stays RUNNING after this returns
            run.completed_at = timezone.now()
            run.status = ReconciliationRunStatus.FAILED
            run.accounts_checked = accounts_checked
            run.discrepancies_found = len(alert_ids)
            run.error_message = str(e)
            run.save()

            cls.get_logger().error(
                "Reconciliation run failed",
                extra={"run_id": str(run.id), "error": str(e)},
                exc_info=True,
            )
            raise ReconciliationError(
                f"Reconciliation run failed: {e}",
                details={"run_id": str(run.id)},
            ) from e

        completed_at = timezone.now()
        run.completed_at = completed_at
        run.status = ReconciliationRunStatus.COMPLETED
        run.accounts_checked = accounts_checked
        run.discrepancies_found = len(alert_ids)
        run.computed_total = totals.computed_total
        run.stored_total = totals.stored_total
        run.save()

        if not totals.is_closed:
            logger.error(
                "Ledger is not closed",
                extra={
                    "run_id": str(run.id),
                    "computed_total": totals.computed_total,
                    "stored_total": totals.stored_total,
                },
            )

        cls.get_logger().info(
            "Reconciliation run completed",
            extra={
                "run_id": str(run.id),
                "accounts_checked": accounts_checked,
                "discrepancies_found": len(alert_ids),
                "duration_seconds": (completed_at - started_at).total_seconds(),
            },
        )
        return ServiceResult.success(
            ReconciliationRunResult(
                run_id=run.id,
                started_at=started_at,
                completed_at=completed_at,
                accounts_checked=accounts_checked,
                discrepancies_found=len(alert_ids),
                totals=totals,
                alert_ids=alert_ids,
            )
        )

    @classmethod
    def resolve_alert(
        cls,
        alert_id: uuid.UUID,
        resolved_by,
        notes: str = "",
    ) -> DiscrepancyAlert:
        """
        Close an alert after review.

        Raises:
            AlertNotFoundError: If the alert doesn't exist
            AlertAlreadyResolvedError: If the alert was resolved earlier
        """
        with transaction.atomic():
            alert = _lock_open_alert(alert_id)
            _mark_resolved(alert, resolved_by, notes)

        cls.get_logger().info(
            "Discrepancy alert resolved",
            extra={"alert_id": str(alert.id), "account_id": str(alert.account_id)},
        )
        return alert

    @classmethod
    def correct_balance(
        cls,
        account_id: uuid.UUID,
        corrected_by,
        reason: str,
        evidence: str = "",
        alert_id: uuid.UUID | None = None,
    ) -> BalanceCorrection:
        """
        Set an account's cached balance to the balance of its transactions.

        Runs under a row lock on the account and records a BalanceCorrection
        with the before/after values. When alert_id is given the alert is
        resolved in the same transaction.

        Args:
            account_id: UUID of the ledger account
            corrected_by: Administrator making the change
            reason: Why the balance is being corrected (required)
            evidence: References supporting the correction
            alert_id: Alert that prompted the correction

        Returns:
            The BalanceCorrection record (adjustment 0 if nothing changed)

        Raises:
            InvalidInputError: If no reason is given, or the alert is for
                another account
            AccountNotFound: If the account doesn't exist
            AlertNotFoundError: If alert_id doesn't exist
            AlertAlreadyResolvedError: If the alert was resolved earlier
        """
        if not reason or not reason.strip():
            raise InvalidInputError("A reason is required to correct a balance")

        with transaction.atomic():
            try:
                account = LedgerAccount.objects.select_for_update().get(pk=account_id)
            except LedgerAccount.DoesNotExist:
                raise AccountNotFound(
                    f"Account {account_id} not found",
                    details={"account_id": str(account_id)},
                ) from None

            original = account.balance
            computed = account.computed_balance()
            alert = None
            if alert_id is not None:
                alert = _lock_open_alert(alert_id)
                if alert.account_id != account.pk:
                    raise InvalidInputError(
                        "Alert belongs to a different account",
                        details={
                            "alert_id": str(alert_id),
                            "account_id": str(account_id),
                            "alert_account_id": str(alert.account_id),
                        },
                    )
                _mark_resolved(alert, corrected_by, reason)

            LedgerAccount.objects.filter(pk=account.pk).update(balance=computed)
            correction = BalanceCorrection.objects.create(
                account=account,
                alert=alert,
                original_balance=original,
                corrected_balance=computed,
                adjustment=computed - original,
                reason=reason,
                evidence=evidence,
                corrected_by=corrected_by,
            )

        cls.get_logger().warning(
            "Account balance corrected",
            extra={
                "account_id": str(account_id),
                "correction_id": str(correction.id),
                "original_balance": original,
                "corrected_balance": computed,
                "corrected_by": str(getattr(corrected_by, "pk", corrected_by)),
            },
        )
        return correction

    @classmethod
    def get_run_history(cls, limit: int = 30) -> list[ReconciliationRun]:
        """Most recent reconciliation runs, newest first."""
        return list(ReconciliationRun.objects.order_by("-started_at")[:limit])

    @classmethod
    def get_correction_history(
        cls, account_id: uuid.UUID, limit: int = 100
    ) -> list[BalanceCorrection]:
        """
        Balance corrections applied to an account, newest first.

        Raises:
            AccountNotFound: If the account doesn't exist
        """
        if not LedgerAccount.objects.filter(pk=account_id).exists():
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )
        return list(
            BalanceCorrection.objects.filter(account_id=account_id)
            .select_related("alert")
            .order_by("-created_at")[:limit]
        )


def _computed_balances() -> dict[uuid.UUID, int]:
    """Recomputed balance of every account that has transactions."""
    balances: dict[uuid.UUID, int] = {}
    credits = LedgerTransaction.objects.values("to_account_id").annotate(
        total=Sum("amount")
    )
    for row in credits.order_by():
        balances[row["to_account_id"]] = row["total"]
    debits = LedgerTransaction.objects.values("from_account_id").annotate(
        total=Sum("amount")
    )
    for row in debits.order_by():
        account_id = row["from_account_id"]
        balances[account_id] = balances.get(account_id, 0) - row["total"]
    return balances


def _log_discrepancy(account: LedgerAccount, report: AccountReconciliation) -> None:
    logger.error(
        "Ledger balance discrepancy detected",
        extra={
            "account_id": str(account.id),
            "account_type": account.type,
            "owner_id": str(account.owner_id) if account.owner_id else None,
            "stored_balance": report.stored_balance,
            "computed_balance": report.computed_balance,
            "discrepancy": report.discrepancy,
        },
    )


def _lock_open_alert(alert_id: uuid.UUID) -> DiscrepancyAlert:
    """Lock an unresolved alert; call inside transaction.atomic()."""
    try:
        alert = DiscrepancyAlert.objects.select_for_update().get(pk=alert_id)
    except DiscrepancyAlert.DoesNotExist:
        raise AlertNotFoundError(
            f"Alert {alert_id} not found",
            details={"alert_id": str(alert_id)},
        ) from None
    if alert.resolved:
        raise AlertAlreadyResolvedError(
            f"Alert {alert_id} is already resolved",
            details={
                "alert_id": str(alert_id),
                "resolved_at": (
                    alert.resolved_at.isoformat() if alert.resolved_at else None
                ),
            },
        )
    return alert


def _mark_resolved(alert: DiscrepancyAlert, resolved_by, notes: str) -> None:
    alert.resolved = True
    alert.resolved_at = timezone.now()
    alert.resolved_by = resolved_by
    alert.resolution_notes = notes
    alert.save(
        update_fields=[
            "resolved",
            "resolved_at",
            "resolved_by",
            "resolution_notes",
            "updated_at",
        ]
    )
