"""
Payment domain models.

This module contains all payment-related models:
- LedgerAccount, LedgerTransaction, BookingPayment: The ledger
  (defined in payments.ledger.models)
- ReconciliationRun: Tracks reconciliation run executions
- DiscrepancyAlert: Accounts whose cached balance disagreed with history
- BalanceCorrection: Audited admin resets of a cached balance
"""

from payments.ledger.models import (
    AccountType,
    BookingPayment,
    LedgerAccount,
    LedgerTransaction,
    TransactionKind,
)
from payments.models.reconciliation import (
    AlertSeverity,
    BalanceCorrection,
    DiscrepancyAlert,
    ReconciliationRun,
    ReconciliationRunStatus,
)

__all__ = [
    "AccountType",
    "AlertSeverity",
    "BalanceCorrection",
    "BookingPayment",
    "DiscrepancyAlert",
    "LedgerAccount",
    "LedgerTransaction",
    "ReconciliationRun",
    "ReconciliationRunStatus",
    "TransactionKind",
]
