"""
Data types returned by ledger and reconciliation operations.

Types:
    PaymentApplication: The payment row and transactions of an applied payment
    RefundApplication: The payment row and transactions of an applied refund
    AccountReconciliation: Stored vs. recomputed balance of one account
    LedgerTotals: Ledger-wide sums used to check the ledger is closed
    ReconciliationRunResult: Summary of a full reconciliation run

Usage:
    from payments.ledger.types import AccountReconciliation

    report = AccountReconciliation(account_id, computed_balance=84, stored_balance=84)
    report.discrepancy  # 0
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from payments.ledger.models import BookingPayment, LedgerTransaction


@dataclass(frozen=True)
class PaymentApplication:
    """
    Result of LedgerService.apply_payment().

    Attributes:
        payment: The BookingPayment row
        transactions: Payer->hospital and payer->platform movements; a zero
            share produces no movement
    """

    payment: BookingPayment
    transactions: list[LedgerTransaction]


@dataclass(frozen=True)
class RefundApplication:
    """
    Result of LedgerService.apply_refund().

    Attributes:
        payment: The BookingPayment row, now marked refunded
        transactions: Hospital->payer and platform->payer movements
    """

    payment: BookingPayment
    transactions: list[LedgerTransaction]


@dataclass(frozen=True)
class AccountReconciliation:
    """
    Stored balance of an account compared with its transaction history.

    Attributes:
        account_id: UUID of the account
        computed_balance: Signed sum of the account's transactions
        stored_balance: Cached balance column
    """

    account_id: uuid.UUID
    computed_balance: int
    stored_balance: int

    @property
    def discrepancy(self) -> int:
        """stored_balance - computed_balance; zero when the account is clean."""
        return self.stored_balance - self.computed_balance

    @property
    def is_balanced(self) -> bool:
        return self.discrepancy == 0


@dataclass(frozen=True)
class LedgerTotals:
    """
    Ledger-wide totals.

    Every movement debits one account and credits another, so both totals
    are zero for a closed ledger.

    Attributes:
        computed_total: Sum of all accounts' recomputed balances
        stored_total: Sum of all accounts' cached balances
    """

    computed_total: int
    stored_total: int

    @property
    def is_closed(self) -> bool:
        return self.computed_total == 0 and self.stored_total == 0


@dataclass
class ReconciliationRunResult:
    """Summary of a full reconciliation run."""

    run_id: uuid.UUID
    started_at: datetime
    completed_at: datetime
    accounts_checked: int
    discrepancies_found: int
    totals: LedgerTotals
    alert_ids: list[uuid.UUID] = field(default_factory=list)
