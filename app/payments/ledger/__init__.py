"""
Ledger - bookkeeping for booking payments.

Every money movement is an append-only LedgerTransaction from one
LedgerAccount to another, and each account keeps a cached balance that is
updated in the same database transaction as its postings.

Public API:
    Models:
        LedgerAccount - Account with a cached balance
        LedgerTransaction - Append-only movement between accounts
        BookingPayment - One row per paid booking
        AccountType - Enum of account categories
        TransactionKind - payment, refund, reversal

    Service:
        LedgerService - apply_payment, apply_refund, reverse_transaction and
            account helpers

    Types:
        PaymentApplication, RefundApplication, AccountReconciliation,
        LedgerTotals, ReconciliationRunResult

    Exceptions:
        LedgerError - Base exception for ledger operations
        AccountNotFound - Account lookup failures
        TransactionNotFound - Transaction lookup failures
        InsufficientBalance - Debit would take an account below zero
        InactiveAccount - Operations on inactive accounts
        ImmutableTransactionError - Attempt to edit a posted transaction

Usage:
    from payments.ledger import LedgerService

    application = LedgerService.apply_payment(
        booking_id=booking.id,
        amount=booking.total_amount,
        hospital_account_id=hospital.id,
        admin_account_id=platform.id,
        hospital_share=booking.hospital_share,
        service_charge_share=booking.service_charge_share,
    )
    LedgerService.get_balance(hospital.id)  # Money(minor_units=84, currency='bdt')
"""

from .exceptions import (
    AccountNotFound,
    ImmutableTransactionError,
    InactiveAccount,
    InsufficientBalance,
    LedgerError,
    TransactionNotFound,
)
from .models import (
    AccountType,
    BookingPayment,
    LedgerAccount,
    LedgerTransaction,
    TransactionKind,
)
from .services import LedgerService
from .types import (
    AccountReconciliation,
    LedgerTotals,
    PaymentApplication,
    ReconciliationRunResult,
    RefundApplication,
)

__all__ = [
    # Models
    "AccountType",
    "BookingPayment",
    "LedgerAccount",
    "LedgerTransaction",
    "TransactionKind",
    # Service
    "LedgerService",
    # Types
    "AccountReconciliation",
    "LedgerTotals",
    "PaymentApplication",
    "ReconciliationRunResult",
    "RefundApplication",
    # Exceptions
    "AccountNotFound",
    "ImmutableTransactionError",
    "InactiveAccount",
    "InsufficientBalance",
    "LedgerError",
    "TransactionNotFound",
]
