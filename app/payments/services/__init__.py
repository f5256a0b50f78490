"""
Payment services coordinating the ledger.

This module provides:
- PaymentService: Payment submission handler (payments and refunds)
- ReconciliationService: Balance checks, alerts and audited corrections

Usage:
    from payments.services import PaymentService

    result = PaymentService.submit_payment(booking_id, amount=120)
    if not result.success:
        result.error_code  # e.g. "DUPLICATE_PAYMENT"

    from payments.services import ReconciliationService

    report = ReconciliationService.reconcile(account_id)
    report.discrepancy  # 0 when the cached balance matches history
"""

from payments.services.payment_service import PaymentService
from payments.services.reconciliation_service import ReconciliationService

__all__ = [
    "PaymentService",
    "ReconciliationService",
]
