"""
Celery tasks for ledger reconciliation.

This module provides async tasks for:
- The daily full reconciliation run (scheduled via celery-beat, see
  migration 0002_add_reconciliation_schedule)
- On-demand reconciliation of a single account

Usage:
    from payments.tasks import reconcile_account

    reconcile_account.delay(str(account_id))
"""

from __future__ import annotations

import logging
from uuid import UUID

from celery import shared_task

from payments.exceptions import ReconciliationError, ReconciliationLockError

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def run_scheduled_reconciliation(self) -> dict:
    """
    Run a full reconciliation pass over every ledger account.

    Returns:
        Dict with:
        - status: "completed", "skipped" (lock held), or "failed"
        - run_id: UUID of the reconciliation run
        - accounts_checked: Number of accounts compared
        - discrepancies_found: Accounts whose balances disagreed
        - ledger_closed: Whether all balances sum to zero
        - error: Error message if failed

    Note:
        If another reconciliation run holds the lock, this task waits up to
        settings.RECONCILIATION_LOCK_TIMEOUT_SECONDS for it and then returns
        with status "skipped".
    """
    from payments.services import ReconciliationService

    logger.info("Starting scheduled reconciliation run")

    try:
        result = ReconciliationService.run_reconciliation()
    except ReconciliationLockError:
        logger.info(
            "Reconciliation run skipped - another run in progress",
            extra={"task_id": self.request.id},
        )
        return {
            "status": "skipped",
            "reason": "Another reconciliation run is in progress",
        }
    except ReconciliationError as e:
        logger.error(
            f"Reconciliation failed: {e.message}",
            extra={"error_code": e.error_code, "details": e.details},
        )
        return {
            "status": "failed",
            "error": e.message,
            "error_code": e.error_code,
        }

    run_result = result.data
    logger.info(
        "Scheduled reconciliation completed",
        extra={
            "run_id": str(run_result.run_id),
            "accounts_checked": run_result.accounts_checked,
            "discrepancies_found": run_result.discrepancies_found,
        },
    )
    return {
        "status": "completed",
        "run_id": str(run_result.run_id),
        "accounts_checked": run_result.accounts_checked,
        "discrepancies_found": run_result.discrepancies_found,
        "ledger_closed": run_result.totals.is_closed,
    }


@shared_task(bind=True)
def reconcile_account(self, account_id: str) -> dict:
    """
    Reconcile a single ledger account.

    Args:
        account_id: UUID string of the LedgerAccount

    Returns:
        Dict with status ("balanced", "discrepancy" or "failed") and the
        stored and computed balances
    """
    from payments.ledger.exceptions import AccountNotFound
    from payments.services import ReconciliationService

    try:
        report = ReconciliationService.reconcile(UUID(account_id))
    except AccountNotFound as e:
        logger.warning(
            f"Cannot reconcile account: {e.message}",
            extra={"account_id": account_id},
        )
        return {"status": "failed", "error": e.message, "error_code": e.error_code}

    return {
        "status": "balanced" if report.is_balanced else "discrepancy",
        "account_id": account_id,
        "stored_balance": report.stored_balance,
        "computed_balance": report.computed_balance,
        "discrepancy": report.discrepancy,
    }
