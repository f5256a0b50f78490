"""
Ledger models for booking payments.

This module defines the bookkeeping tables of the billing core:
- LedgerAccount: Holds a cached balance (hospital revenue, platform revenue,
  external payments clearing)
- LedgerTransaction: Append-only record of one movement between two accounts
- BookingPayment: The payments-applied table, one row per paid booking

Every transaction debits one account and credits another, so the signed
sum of all movements is zero. The cached balance of an account must equal
the signed sum of its transactions; reconciliation verifies that.

Usage:
    from payments.ledger.models import AccountType, LedgerAccount

    platform = LedgerAccount.objects.get(
        type=AccountType.PLATFORM_REVENUE, owner_id=None, currency="bdt"
    )
    platform.balance             # cached, updated with every posting
    platform.computed_balance()  # recomputed from transactions
"""

from __future__ import annotations

from django.db import models
from django.db.models import Case, F, Q, Sum, Value, When
from django.db.models.functions import Coalesce

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.ledger.exceptions import ImmutableTransactionError


class AccountType(models.TextChoices):
    """
    Types of ledger accounts.

    Values:
        HOSPITAL_REVENUE: A hospital's earned share (owner_id = hospital id)
        PLATFORM_REVENUE: The platform admin's service charge account
        EXTERNAL_PAYMENTS: Clearing account for confirmed payer funds;
            its balance is the negative of everything paid in
    """

    HOSPITAL_REVENUE = "hospital_revenue", "Hospital Revenue"
    PLATFORM_REVENUE = "platform_revenue", "Platform Revenue"
    EXTERNAL_PAYMENTS = "external_payments", "External Payments"


class TransactionKind(models.TextChoices):
    """
    Categories of ledger movements.

    Values:
        PAYMENT: Payer funds credited to a hospital or the platform
        REFUND: A payment movement returned to the payer
        REVERSAL: Audited correction mirroring a single transaction
    """

    PAYMENT = "payment", "Payment"
    REFUND = "refund", "Refund"
    REVERSAL = "reversal", "Reversal"


class LedgerAccount(UUIDPrimaryKeyMixin, models.Model):
    """
    A ledger account with a cached balance.

    The balance column is a materialized view of the account's transactions.
    It is only changed by LedgerService, in the same database transaction as
    the postings, using single-statement ``balance = balance + delta``
    updates.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        type: Account category
        owner_id: Hospital UUID for hospital accounts, NULL otherwise
        currency: ISO 4217 currency code
        balance: Cached balance in minor units
        allow_negative: Whether balance can go negative (external account)
        is_active: Whether the account accepts postings
        created_at: Timestamp when account was created

    Constraints:
        - Unique combination of (type, owner_id, currency)
        - One ownerless account per (type, currency)
        - balance >= 0 unless allow_negative
    """

    type = models.CharField(
        max_length=50,
        choices=AccountType.choices,
        help_text="Category of this account",
    )
    owner_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="UUID of the hospital that owns this account",
    )
    currency = models.CharField(
        max_length=3,
        default="bdt",
        help_text="ISO 4217 currency code",
    )
    balance = models.BigIntegerField(
        default=0,
        help_text="Cached balance in minor units",
    )
    allow_negative = models.BooleanField(
        default=False,
        help_text="Whether this account can have a negative balance",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this account accepts postings",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this account was created",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["type", "owner_id", "currency"],
                name="unique_account_per_owner",
            ),
            models.UniqueConstraint(
                fields=["type", "currency"],
                condition=Q(owner_id__isnull=True),
                name="unique_system_account",
            ),
            models.CheckConstraint(
                condition=Q(allow_negative=True) | Q(balance__gte=0),
                name="ledger_account_balance_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["type", "currency"], name="ledger_account_type_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation."""
        if self.owner_id:
            return f"{self.get_type_display()} ({self.owner_id})"
        return self.get_type_display()

    def computed_balance(self) -> int:
        """
        Recompute the balance from transactions.

        Credits to this account count positive, debits negative.

        Returns:
            Balance in minor units
        """
        result = LedgerTransaction.objects.filter(
            Q(to_account=self) | Q(from_account=self)
        ).aggregate(
            credits=Coalesce(
                Sum(
                    Case(
                        When(to_account=self, then="amount"),
                        default=Value(0),
                        output_field=models.BigIntegerField(),
                    )
                ),
                Value(0),
                output_field=models.BigIntegerField(),
            ),
            debits=Coalesce(
                Sum(
                    Case(
                        When(from_account=self, then="amount"),
                        default=Value(0),
                        output_field=models.BigIntegerField(),
                    )
                ),
                Value(0),
                output_field=models.BigIntegerField(),
            ),
        )
        return result["credits"] - result["debits"]


class LedgerTransactionQuerySet(models.QuerySet):
    """Queryset that refuses bulk edits of posted transactions."""

    def update(self, **kwargs):
        raise ImmutableTransactionError("Ledger transactions cannot be updated")

    def delete(self):
        raise ImmutableTransactionError("Ledger transactions cannot be deleted")

    def for_account(self, account_id):
        return self.filter(Q(from_account_id=account_id) | Q(to_account_id=account_id))


class LedgerTransaction(UUIDPrimaryKeyMixin, models.Model):
    """
    One movement of money from one account to another.

    Transactions are append-only: saving an existing row or deleting one
    raises ImmutableTransactionError. Corrections are posted as new
    REVERSAL rows.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        created_at: Timestamp when the movement was recorded
        booking: Booking the movement belongs to
        from_account: Account debited
        to_account: Account credited
        amount: Minor units, always positive
        currency: ISO 4217 currency code
        kind: payment, refund or reversal
        reverses: For reversals, the transaction being mirrored
        idempotency_key: Unique key preventing duplicate postings
        description / metadata / created_by: Audit context

    Constraints:
        - amount > 0
        - from_account != to_account
        - idempotency_key unique
        - at most one reversal per transaction
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this movement was recorded",
    )
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="ledger_transactions",
        help_text="Booking the movement belongs to",
    )
    from_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="debit_transactions",
        help_text="Account money is taken from",
    )
    to_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="credit_transactions",
        help_text="Account money is added to",
    )
    amount = models.PositiveBigIntegerField(
        help_text="Amount in minor units (always positive)",
    )
    currency = models.CharField(
        max_length=3,
        default="bdt",
        help_text="ISO 4217 currency code",
    )
    kind = models.CharField(
        max_length=20,
        choices=TransactionKind.choices,
        db_index=True,
        help_text="Category of this movement",
    )
    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversal",
        help_text="Transaction mirrored by this reversal",
    )
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique key to prevent duplicate postings",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Human-readable description of this movement",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Arbitrary JSON data for extensibility",
    )
    created_by = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Identifier of the service or user that posted this",
    )

    objects = LedgerTransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "kind"], name="ledger_tx_booking_kind_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="ledger_transaction_amount_positive",
            ),
            models.CheckConstraint(
                condition=~Q(from_account=F("to_account")),
                name="ledger_transaction_distinct_accounts",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.get_kind_display()}: {self.amount} {self.currency.upper()}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableTransactionError(
                f"Ledger transaction {self.pk} cannot be modified",
                details={"transaction_id": str(self.pk)},
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableTransactionError(
            f"Ledger transaction {self.pk} cannot be deleted",
            details={"transaction_id": str(self.pk)},
        )


class BookingPayment(UUIDPrimaryKeyMixin, BaseModel):
    """
    Record of the single successful payment of a booking.

    The one-to-one link to the booking is the database-level guard against
    double payment: a concurrent second insert fails with IntegrityError.

    Fields:
        booking: The paid booking (unique)
        amount: Total paid, minor units
        hospital_share / service_charge_share: Split credited to each account
        currency: ISO 4217 currency code
        payer_account / hospital_account / platform_account: Accounts posted to
        paid_at: When the payment was applied
        refunded_at: When the full refund was applied (NULL if not refunded)
        created_by: Identifier of whoever submitted the payment

    Constraints:
        - amount = hospital_share + service_charge_share
        - amount > 0
    """

    booking = models.OneToOneField(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payment",
        help_text="The paid booking",
    )
    amount = models.PositiveBigIntegerField(
        help_text="Total paid in minor units",
    )
    hospital_share = models.PositiveBigIntegerField(
        help_text="Part credited to the hospital account",
    )
    service_charge_share = models.PositiveBigIntegerField(
        help_text="Part credited to the platform account",
    )
    currency = models.CharField(
        max_length=3,
        default="bdt",
        help_text="ISO 4217 currency code",
    )
    payer_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Account the payment was taken from",
    )
    hospital_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Hospital revenue account credited",
    )
    platform_account = models.ForeignKey(
        LedgerAccount,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Platform revenue account credited",
    )
    paid_at = models.DateTimeField(
        help_text="When the payment was applied",
    )
    refunded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payment was refunded",
    )
    created_by = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Identifier of the service or user that submitted this",
    )

    class Meta:
        ordering = ["-paid_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount=F("hospital_share") + F("service_charge_share")),
                name="booking_payment_shares_sum_to_amount",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="booking_payment_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"BookingPayment({self.booking_id}, "
            f"{self.amount} {self.currency.upper()})"
        )

    @property
    def is_refunded(self) -> bool:
        return self.refunded_at is not None


__all__ = [
    "AccountType",
    "BookingPayment",
    "LedgerAccount",
    "LedgerTransaction",
    "TransactionKind",
]
