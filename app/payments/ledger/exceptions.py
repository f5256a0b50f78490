"""
Ledger-specific exceptions for financial operations.

This module provides a hierarchy of exceptions for ledger operations,
inheriting from the core exception base class for API consistency.

Exception Hierarchy:
    LedgerError (base)
    ├── AccountNotFound - Account lookup failures (also a NotFoundError)
    ├── TransactionNotFound - Transaction lookup failures (also a NotFoundError)
    ├── InsufficientBalance - A debit would take an account below zero
    ├── InactiveAccount - Operations on inactive accounts
    └── ImmutableTransactionError - Attempt to change or delete a posted row

Usage:
    from payments.ledger.exceptions import InsufficientBalance, AccountNotFound

    if account.balance + delta < 0:
        raise InsufficientBalance(account.id, required=-delta, available=account.balance)

    raise AccountNotFound(f"Account {account_id} not found")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, NotFoundError

if TYPE_CHECKING:
    import uuid
    from typing import Any


class LedgerError(BaseApplicationError):
    """
    Base exception for all ledger operations.

    All ledger-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent API error responses.
    """

    default_error_code: str = "LEDGER_ERROR"


class AccountNotFound(LedgerError, NotFoundError):
    """
    Raised when a ledger account cannot be found.

    Example:
        raise AccountNotFound(
            f"Account {account_id} not found",
            details={"account_id": str(account_id)},
        )
    """

    default_error_code: str = "ACCOUNT_NOT_FOUND"


class TransactionNotFound(LedgerError, NotFoundError):
    """Raised when a ledger transaction cannot be found."""

    default_error_code: str = "TRANSACTION_NOT_FOUND"


class InsufficientBalance(LedgerError):
    """
    Raised when a debit would take an account below zero.

    Only accounts with allow_negative=False are checked; the external
    payments clearing account may go negative.

    Attributes:
        account_id: The UUID of the account with insufficient funds
        required: The amount (minor units) that was required
        available: The amount (minor units) that was available
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"

    def __init__(
        self,
        account_id: uuid.UUID,
        required: int,
        available: int,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize with account details and amounts.

        Args:
            account_id: UUID of the account with insufficient funds
            required: Amount required in minor units
            available: Amount available in minor units
            error_code: Optional custom error code
            details: Optional additional error context
        """
        self.account_id = account_id
        self.required = required
        self.available = available

        message = (
            f"Account {account_id} has insufficient balance: "
            f"required {required}, available {available}"
        )

        full_details = {
            "account_id": str(account_id),
            "required": required,
            "available": available,
        }
        if details:
            full_details.update(details)

        super().__init__(
            message=message,
            error_code=error_code,
            details=full_details,
        )


class InactiveAccount(LedgerError):
    """
    Raised when attempting to use an inactive account.

    Accounts can be deactivated but their history is preserved.
    Postings to or from inactive accounts are rejected.
    """

    default_error_code: str = "INACTIVE_ACCOUNT"


class ImmutableTransactionError(LedgerError):
    """
    Raised when code tries to update or delete a posted transaction.

    Corrections are new rows (reversals), never edits.
    """

    default_error_code: str = "IMMUTABLE_TRANSACTION"
