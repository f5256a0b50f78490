"""
Ledger service layer for booking payments.

This module provides the LedgerService class which encapsulates every
write to the ledger. Payments, refunds and reversals each run in a single
database transaction: the transaction rows, the cached balance updates and
the booking's payment status commit together or not at all.

Usage:
    from payments.ledger.services import LedgerService

    hospital = LedgerService.get_hospital_account(booking.hospital_id)
    platform = LedgerService.get_platform_account()

    application = LedgerService.apply_payment(
        booking_id=booking.id,
        amount=120,
        hospital_account_id=hospital.id,
        admin_account_id=platform.id,
        hospital_share=84,
        service_charge_share=36,
    )

    LedgerService.apply_refund(booking.id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from bookings.calculator import Money
from bookings.exceptions import BookingNotFoundError, InvalidStateTransitionError
from bookings.models import Booking
from bookings.states import PaymentStatus
from core.exceptions import InvalidInputError, PersistenceError
from payments.exceptions import (
    DuplicatePaymentError,
    DuplicateRefundError,
    PaymentNotFoundError,
)
from payments.ledger.exceptions import (
    AccountNotFound,
    InactiveAccount,
    InsufficientBalance,
    TransactionNotFound,
)
from payments.ledger.models import (
    AccountType,
    BookingPayment,
    LedgerAccount,
    LedgerTransaction,
    TransactionKind,
)
from payments.ledger.types import PaymentApplication, RefundApplication

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Service class for ledger operations.

    Key features:
    - Atomic transactions for every money movement
    - At most one payment per booking (row lock on the booking plus the
      unique BookingPayment.booking constraint)
    - Account rows locked in primary-key order to prevent deadlocks
    - Balances changed with single-statement F() updates

    Expected failures raise domain exceptions; any database failure inside
    a write is raised as PersistenceError after the transaction rolled back.

    All methods are static - no instance state is maintained.
    """

    # =========================================================================
    # Accounts
    # =========================================================================

    @staticmethod
    def get_or_create_account(
        account_type: AccountType | str,
        owner_id: uuid.UUID | None = None,
        currency: str | None = None,
        allow_negative: bool = False,
    ) -> LedgerAccount:
        """
        Get existing account or create new one.

        Looks up an account by (type, owner_id, currency). If not found,
        creates a new account with the specified parameters.

        Args:
            account_type: Type of account
            owner_id: Hospital UUID for hospital accounts
            currency: ISO 4217 currency code (default: settings.BILLING_CURRENCY)
            allow_negative: Whether account can have negative balance

        Returns:
            The existing or newly created LedgerAccount
        """
        account, _ = LedgerAccount.objects.get_or_create(
            type=account_type,
            owner_id=owner_id,
            currency=currency or settings.BILLING_CURRENCY,
            defaults={"allow_negative": allow_negative},
        )
        return account

    @staticmethod
    def get_account(account_id: uuid.UUID) -> LedgerAccount:
        """
        Get account by ID.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        try:
            return LedgerAccount.objects.get(id=account_id)
        except LedgerAccount.DoesNotExist:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            ) from None

    @staticmethod
    def get_hospital_account(
        hospital_id: uuid.UUID, currency: str | None = None
    ) -> LedgerAccount:
        """Revenue account of a hospital, created on first use."""
        return LedgerService.get_or_create_account(
            AccountType.HOSPITAL_REVENUE,
            owner_id=hospital_id,
            currency=currency,
        )

    @staticmethod
    def get_platform_account(currency: str | None = None) -> LedgerAccount:
        """The platform admin's service charge account."""
        return LedgerService.get_or_create_account(
            AccountType.PLATFORM_REVENUE,
            currency=currency,
        )

    @staticmethod
    def get_payer_account(currency: str | None = None) -> LedgerAccount:
        """
        Clearing account for confirmed external payments.

        Payment authorisation happens before the ledger is called, so this
        account may go negative: its balance is minus the net amount paid in.
        """
        return LedgerService.get_or_create_account(
            AccountType.EXTERNAL_PAYMENTS,
            currency=currency,
            allow_negative=True,
        )

    @staticmethod
    def get_balance(account_id: uuid.UUID) -> Money:
        """
        Get the cached balance for an account.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account = LedgerService.get_account(account_id)
        return Money(minor_units=account.balance, currency=account.currency)

    @staticmethod
    def get_transactions_for_account(
        account_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> list[LedgerTransaction]:
        """
        Get transactions where the account is debited or credited.

        Returns transactions ordered by created_at descending (newest first).
        """
        return list(
            LedgerTransaction.objects.for_account(account_id).order_by(
                "-created_at"
            )[offset : offset + limit]
        )

    @staticmethod
    def get_transactions_for_booking(booking_id: uuid.UUID) -> list[LedgerTransaction]:
        """All movements of a booking, oldest first."""
        return list(
            LedgerTransaction.objects.filter(booking_id=booking_id).order_by(
                "created_at"
            )
        )

    @staticmethod
    def deactivate_account(account_id: uuid.UUID) -> LedgerAccount:
        """
        Mark an account inactive.

        Inactive accounts reject new postings but keep their history.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account = LedgerService.get_account(account_id)
        account.is_active = False
        account.save(update_fields=["is_active"])
        return account

    @staticmethod
    def reactivate_account(account_id: uuid.UUID) -> LedgerAccount:
        """
        Reactivate a previously deactivated account.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account = LedgerService.get_account(account_id)
        account.is_active = True
        account.save(update_fields=["is_active"])
        return account

    # =========================================================================
    # Payments
    # =========================================================================

    @staticmethod
    def apply_payment(
        booking_id: uuid.UUID,
        amount: int,
        hospital_account_id: uuid.UUID,
        admin_account_id: uuid.UUID,
        hospital_share: int,
        service_charge_share: int,
        payer_account_id: uuid.UUID | None = None,
        created_by: str | None = None,
    ) -> PaymentApplication:
        """
        Record a booking's payment and credit the hospital and platform.

        In one database transaction: lock the booking, insert the
        BookingPayment row, post payer->hospital and payer->platform
        PAYMENT transactions, update the three cached balances and move the
        booking from UNPAID to PAID. A share of zero posts no transaction.

        Args:
            booking_id: UUID of the booking being paid
            amount: Total paid, minor units; must equal the two shares
            hospital_account_id: Hospital revenue account to credit
            admin_account_id: Platform revenue account to credit
            hospital_share: Part for the hospital (must match the booking)
            service_charge_share: Part for the platform (must match the booking)
            payer_account_id: Account debited (default: external payments)
            created_by: Identifier of the caller, for the audit trail

        Returns:
            PaymentApplication with the payment row and its transactions

        Raises:
            InvalidInputError: Amounts don't add up or don't match the booking
            BookingNotFoundError: Unknown booking
            DuplicatePaymentError: The booking is already paid
            InvalidStateTransitionError: The booking was declined or cancelled
            AccountNotFound / InactiveAccount: Unusable account
            PersistenceError: The database failed; nothing was committed
        """
        _validate_amount(amount, "amount", positive=True)
        _validate_amount(hospital_share, "hospital_share")
        _validate_amount(service_charge_share, "service_charge_share")
        if amount != hospital_share + service_charge_share:
            raise InvalidInputError(
                "Payment amount must equal hospital share plus service charge",
                details={
                    "amount": amount,
                    "hospital_share": hospital_share,
                    "service_charge_share": service_charge_share,
                },
            )
        if hospital_account_id == admin_account_id:
            raise InvalidInputError(
                "Hospital and platform accounts must be different",
                details={"account_id": str(hospital_account_id)},
            )

        try:
            with transaction.atomic():
                booking = _lock_booking(booking_id)
                if booking.payment_status != PaymentStatus.UNPAID:
                    raise DuplicatePaymentError(
                        f"Booking {booking_id} is already paid",
                        details={
                            "booking_id": str(booking_id),
                            "payment_status": booking.payment_status,
                        },
                    )
                if not booking.is_payable:
                    raise InvalidStateTransitionError(
                        f"Cannot pay for a booking that is {booking.status}",
                        details={
                            "booking_id": str(booking_id),
                            "status": booking.status,
                        },
                    )
                if (
                    amount != booking.total_amount
                    or hospital_share != booking.hospital_share
                    or service_charge_share != booking.service_charge_share
                ):
                    raise InvalidInputError(
                        "Payment does not match the amounts fixed on the booking",
                        details={
                            "booking_id": str(booking_id),
                            "expected_amount": booking.total_amount,
                            "expected_hospital_share": booking.hospital_share,
                            "expected_service_charge_share": (
                                booking.service_charge_share
                            ),
                        },
                    )

                if payer_account_id is None:
                    payer_account_id = LedgerService.get_payer_account(
                        booking.currency
                    ).id
                accounts = _lock_accounts(
                    [payer_account_id, hospital_account_id, admin_account_id]
                )
                payer = accounts[payer_account_id]
                hospital = accounts[hospital_account_id]
                platform = accounts[admin_account_id]
                _check_payment_accounts(booking, payer, hospital, platform)

                movements = [
                    (hospital, hospital_share, "hospital"),
                    (platform, service_charge_share, "platform"),
                ]
                deltas = {payer.id: -amount}
                for account, share, _ in movements:
                    deltas[account.id] = deltas.get(account.id, 0) + share
                _check_balances(accounts, deltas)

                try:
                    with transaction.atomic():
                        payment = BookingPayment.objects.create(
                            booking=booking,
                            amount=amount,
                            hospital_share=hospital_share,
                            service_charge_share=service_charge_share,
                            currency=booking.currency,
                            payer_account=payer,
                            hospital_account=hospital,
                            platform_account=platform,
                            paid_at=timezone.now(),
                            created_by=created_by or "",
                        )
                except IntegrityError as e:
                    raise DuplicatePaymentError(
                        f"Booking {booking_id} is already paid",
                        details={"booking_id": str(booking_id)},
                    ) from e

                transactions = [
                    LedgerService._post_transaction(
                        booking=booking,
                        from_account=payer,
                        to_account=account,
                        amount=share,
                        kind=TransactionKind.PAYMENT,
                        idempotency_key=f"payment:{booking_id}:{label}",
                        description=f"Payment of booking {booking_id} ({label} share)",
                        created_by=created_by,
                    )
                    for account, share, label in movements
                    if share > 0
                ]
                _apply_deltas(deltas)

                booking.mark_paid()
                booking.save(update_fields=["payment_status", "paid_at", "updated_at"])
        except DatabaseError as e:
            raise _persistence_error(f"Payment for booking {booking_id}", e) from e

        logger.info(
            "Payment applied",
            extra={
                "booking_id": str(booking_id),
                "payment_id": str(payment.id),
                "payer_account_id": str(payer.id),
                "hospital_account_id": str(hospital.id),
                "admin_account_id": str(platform.id),
                "amount": amount,
                "hospital_share": hospital_share,
                "service_charge_share": service_charge_share,
            },
        )
        return PaymentApplication(payment=payment, transactions=transactions)

    @staticmethod
    def apply_refund(
        booking_id: uuid.UUID,
        created_by: str | None = None,
    ) -> RefundApplication:
        """
        Refund a booking's payment in full.

        Posts hospital->payer and platform->payer REFUND transactions for
        the shares that were paid, decrements both revenue balances, marks
        the payment refunded and moves the booking from PAID to REFUNDED,
        all in one database transaction.

        Raises:
            BookingNotFoundError: Unknown booking
            PaymentNotFoundError: The booking has no payment
            DuplicateRefundError: The payment was already refunded
            InactiveAccount / InsufficientBalance: Unusable revenue account
            PersistenceError: The database failed; nothing was committed
        """
        try:
            with transaction.atomic():
                booking = _lock_booking(booking_id)
                try:
                    payment = BookingPayment.objects.select_for_update().get(
                        booking=booking
                    )
                except BookingPayment.DoesNotExist:
                    raise PaymentNotFoundError(
                        f"Booking {booking_id} has no payment to refund",
                        details={"booking_id": str(booking_id)},
                    ) from None
                if payment.is_refunded or booking.payment_status != PaymentStatus.PAID:
                    raise DuplicateRefundError(
                        f"Payment of booking {booking_id} is already refunded",
                        details={
                            "booking_id": str(booking_id),
                            "payment_id": str(payment.id),
                        },
                    )

                accounts = _lock_accounts(
                    [
                        payment.payer_account_id,
                        payment.hospital_account_id,
                        payment.platform_account_id,
                    ]
                )
                payer = accounts[payment.payer_account_id]
                movements = [
                    (
                        accounts[payment.hospital_account_id],
                        payment.hospital_share,
                        "hospital",
                    ),
                    (
                        accounts[payment.platform_account_id],
                        payment.service_charge_share,
                        "platform",
                    ),
                ]
                deltas = {payer.id: payment.amount}
                for account, share, _ in movements:
                    deltas[account.id] = deltas.get(account.id, 0) - share
                _check_balances(accounts, deltas)

                transactions = [
                    LedgerService._post_transaction(
                        booking=booking,
                        from_account=account,
                        to_account=payer,
                        amount=share,
                        kind=TransactionKind.REFUND,
                        idempotency_key=f"refund:{booking_id}:{label}",
                        description=f"Refund of booking {booking_id} ({label} share)",
                        created_by=created_by,
                    )
                    for account, share, label in movements
                    if share > 0
                ]
                _apply_deltas(deltas)

                payment.refunded_at = timezone.now()
                payment.save(update_fields=["refunded_at", "updated_at"])
                booking.mark_refunded()
                booking.save(
                    update_fields=["payment_status", "refunded_at", "updated_at"]
                )
        except DatabaseError as e:
            raise _persistence_error(f"Refund for booking {booking_id}", e) from e

        logger.info(
            "Refund applied",
            extra={
                "booking_id": str(booking_id),
                "payment_id": str(payment.id),
                "hospital_account_id": str(payment.hospital_account_id),
                "admin_account_id": str(payment.platform_account_id),
                "amount": payment.amount,
                "hospital_share": payment.hospital_share,
                "service_charge_share": payment.service_charge_share,
            },
        )
        return RefundApplication(payment=payment, transactions=transactions)

    @staticmethod
    def reverse_transaction(
        transaction_id: uuid.UUID,
        reason: str,
        created_by: str | None = None,
    ) -> LedgerTransaction:
        """
        Post the mirror movement of a single transaction.

        Used by administrators to correct a wrongly posted movement without
        editing history. Idempotent: a transaction is reversed at most once,
        and calling again returns the existing reversal. Booking and payment
        states are not changed.

        Args:
            transaction_id: UUID of the transaction to reverse
            reason: Why the reversal is posted (stored as the description)
            created_by: Identifier of the administrator

        Returns:
            The REVERSAL transaction

        Raises:
            TransactionNotFound: Unknown transaction
            InvalidInputError: The transaction is itself a reversal, or no
                reason was given
            InactiveAccount / InsufficientBalance: Unusable account
            PersistenceError: The database failed; nothing was committed
        """
        if not reason or not reason.strip():
            raise InvalidInputError("A reason is required to reverse a transaction")

        try:
            with transaction.atomic():
                try:
                    original = LedgerTransaction.objects.get(pk=transaction_id)
                except LedgerTransaction.DoesNotExist:
                    raise TransactionNotFound(
                        f"Transaction {transaction_id} not found",
                        details={"transaction_id": str(transaction_id)},
                    ) from None
                if original.kind == TransactionKind.REVERSAL:
                    raise InvalidInputError(
                        "A reversal cannot itself be reversed",
                        details={"transaction_id": str(transaction_id)},
                    )

                accounts = _lock_accounts(
                    [original.from_account_id, original.to_account_id]
                )
                existing = LedgerTransaction.objects.filter(reverses=original).first()
                if existing is not None:
                    return existing

                deltas = {
                    original.to_account_id: -original.amount,
                    original.from_account_id: original.amount,
                }
                _check_balances(accounts, deltas)

                try:
                    with transaction.atomic():
                        reversal = LedgerService._post_transaction(
                            booking=original.booking,
                            from_account=accounts[original.to_account_id],
                            to_account=accounts[original.from_account_id],
                            amount=original.amount,
                            kind=TransactionKind.REVERSAL,
                            idempotency_key=f"reversal:{original.id}",
                            description=reason,
                            created_by=created_by,
                            reverses=original,
                        )
                except IntegrityError:
                    # Another process reversed it first
                    return LedgerTransaction.objects.get(reverses=original)
                _apply_deltas(deltas)
        except DatabaseError as e:
            raise _persistence_error(
                f"Reversal of transaction {transaction_id}", e
            ) from e

        logger.info(
            "Transaction reversed",
            extra={
                "booking_id": str(original.booking_id),
                "transaction_id": str(original.id),
                "reversal_id": str(reversal.id),
                "from_account_id": str(reversal.from_account_id),
                "to_account_id": str(reversal.to_account_id),
                "amount": reversal.amount,
                "reason": reason,
            },
        )
        return reversal

    @staticmethod
    def _post_transaction(
        booking: Booking,
        from_account: LedgerAccount,
        to_account: LedgerAccount,
        amount: int,
        kind: str,
        idempotency_key: str,
        description: str = "",
        created_by: str | None = None,
        reverses: LedgerTransaction | None = None,
    ) -> LedgerTransaction:
        """Insert one transaction row. Balances are updated by the caller."""
        return LedgerTransaction.objects.create(
            booking=booking,
            from_account=from_account,
            to_account=to_account,
            amount=amount,
            currency=from_account.currency,
            kind=kind,
            idempotency_key=idempotency_key,
            description=description,
            created_by=created_by or "",
            reverses=reverses,
        )


# =============================================================================
# Helpers
# =============================================================================


def _validate_amount(value: object, field_name: str, positive: bool = False) -> None:
    """Amounts are ints in minor units; bool and float are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(
            f"{field_name} must be an integer number of minor units",
            details={field_name: repr(value)},
        )
    if value < 0 or (positive and value == 0):
        raise InvalidInputError(
            f"{field_name} must be {'positive' if positive else 'non-negative'}",
            details={field_name: value},
        )


def _lock_booking(booking_id: uuid.UUID) -> Booking:
    """SELECT ... FOR UPDATE the booking; must run inside a transaction."""
    try:
        return Booking.objects.select_for_update().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise BookingNotFoundError(
            f"Booking {booking_id} not found",
            details={"booking_id": str(booking_id)},
        ) from None


def _lock_accounts(account_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, LedgerAccount]:
    """
    Lock accounts in primary-key order and check they are usable.

    Raises:
        AccountNotFound: If any account doesn't exist
        InactiveAccount: If any account is inactive
    """
    wanted = set(account_ids)
    # ORDER BY id so concurrent postings acquire row locks in the same order
    accounts = {
        account.id: account
        for account in LedgerAccount.objects.filter(id__in=wanted)
        .select_for_update()
        .order_by("id")
    }
    for account_id in sorted(wanted, key=str):
        if account_id not in accounts:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )
        if not accounts[account_id].is_active:
            raise InactiveAccount(
                f"Account {account_id} is inactive",
                details={"account_id": str(account_id)},
            )
    return accounts


def _check_payment_accounts(
    booking: Booking,
    payer: LedgerAccount,
    hospital: LedgerAccount,
    platform: LedgerAccount,
) -> None:
    """The three accounts of a payment must fit the booking."""
    if hospital.type != AccountType.HOSPITAL_REVENUE or (
        hospital.owner_id != booking.hospital_id
    ):
        raise InvalidInputError(
            "Hospital account does not belong to the booking's hospital",
            details={
                "booking_id": str(booking.id),
                "hospital_account_id": str(hospital.id),
            },
        )
    if platform.type != AccountType.PLATFORM_REVENUE:
        raise InvalidInputError(
            "Service charge must be credited to a platform revenue account",
            details={"admin_account_id": str(platform.id)},
        )
    if payer.id in (hospital.id, platform.id):
        raise InvalidInputError(
            "Payer account must differ from the credited accounts",
            details={"payer_account_id": str(payer.id)},
        )
    for account in (payer, hospital, platform):
        if account.currency != booking.currency:
            raise InvalidInputError(
                f"Account {account.id} is in {account.currency}, "
                f"booking is in {booking.currency}",
                details={"account_id": str(account.id)},
            )


def _check_balances(
    accounts: dict[uuid.UUID, LedgerAccount], deltas: dict[uuid.UUID, int]
) -> None:
    """Reject deltas that would take a non-negative account below zero."""
    for account_id, delta in deltas.items():
        account = accounts[account_id]
        if delta < 0 and not account.allow_negative and account.balance + delta < 0:
            raise InsufficientBalance(
                account.id, required=-delta, available=account.balance
            )


def _apply_deltas(deltas: dict[uuid.UUID, int]) -> None:
    """UPDATE ... SET balance = balance + delta, one statement per account."""
    for account_id in sorted(deltas, key=str):
        delta = deltas[account_id]
        if delta:
            LedgerAccount.objects.filter(pk=account_id).update(
                balance=F("balance") + delta
            )


def _persistence_error(operation: str, exc: DatabaseError) -> PersistenceError:
    logger.error(
        f"{operation} rolled back after a database error",
        extra={"error": str(exc)},
        exc_info=True,
    )
    return PersistenceError(
        f"{operation} could not be stored; nothing was recorded and it is "
        "safe to retry",
    )
