import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def uuid_pk():
    return (
        "id",
        models.UUIDField(
            default=uuid.uuid4,
            editable=False,
            help_text="Unique identifier for this record",
            primary_key=True,
            serialize=False,
        ),
    )


def timestamps():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LedgerAccount",
            fields=[
                uuid_pk(),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("hospital_revenue", "Hospital Revenue"),
                            ("platform_revenue", "Platform Revenue"),
                            ("external_payments", "External Payments"),
                        ],
                        help_text="Category of this account",
                        max_length=50,
                    ),
                ),
                (
                    "owner_id",
                    models.UUIDField(
                        blank=True,
                        db_index=True,
                        help_text="UUID of the hospital that owns this account",
                        null=True,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="bdt", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "balance",
                    models.BigIntegerField(
                        default=0, help_text="Cached balance in minor units"
                    ),
                ),
                (
                    "allow_negative",
                    models.BooleanField(
                        default=False,
                        help_text="Whether this account can have a negative balance",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Whether this account accepts postings",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this account was created",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["type", "currency"], name="ledger_account_type_idx"
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("type", "owner_id", "currency"),
                        name="unique_account_per_owner",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("owner_id__isnull", True)),
                        fields=("type", "currency"),
                        name="unique_system_account",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("allow_negative", True),
                            ("balance__gte", 0),
                            _connector="OR",
                        ),
                        name="ledger_account_balance_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerTransaction",
            fields=[
                uuid_pk(),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this movement was recorded",
                    ),
                ),
                (
                    "amount",
                    models.PositiveBigIntegerField(
                        help_text="Amount in minor units (always positive)"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="bdt", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("payment", "Payment"),
                            ("refund", "Refund"),
                            ("reversal", "Reversal"),
                        ],
                        db_index=True,
                        help_text="Category of this movement",
                        max_length=20,
                    ),
                ),
                (
                    "idempotency_key",
                    models.CharField(
                        help_text="Unique key to prevent duplicate postings",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "description",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Human-readable description of this movement",
                    ),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Arbitrary JSON data for extensibility",
                    ),
                ),
                (
                    "created_by",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Identifier of the service or user that posted this",
                        max_length=255,
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        help_text="Booking the movement belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_transactions",
                        to="bookings.booking",
                    ),
                ),
                (
                    "from_account",
                    models.ForeignKey(
                        help_text="Account money is taken from",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="debit_transactions",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "to_account",
                    models.ForeignKey(
                        help_text="Account money is added to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_transactions",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "reverses",
                    models.OneToOneField(
                        blank=True,
                        help_text="Transaction mirrored by this reversal",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversal",
                        to="payments.ledgertransaction",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["booking", "kind"], name="ledger_tx_booking_kind_idx"
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="ledger_transaction_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("from_account", models.F("to_account")), _negated=True
                        ),
                        name="ledger_transaction_distinct_accounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingPayment",
            fields=[
                *timestamps(),
                uuid_pk(),
                (
                    "amount",
                    models.PositiveBigIntegerField(help_text="Total paid in minor units"),
                ),
                (
                    "hospital_share",
                    models.PositiveBigIntegerField(
                        help_text="Part credited to the hospital account"
                    ),
                ),
                (
                    "service_charge_share",
                    models.PositiveBigIntegerField(
                        help_text="Part credited to the platform account"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="bdt", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                (
                    "paid_at",
                    models.DateTimeField(help_text="When the payment was applied"),
                ),
                (
                    "refunded_at",
                    models.DateTimeField(
                        blank=True, help_text="When the payment was refunded", null=True
                    ),
                ),
                (
                    "created_by",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Identifier of the service or user that submitted this",
                        max_length=255,
                    ),
                ),
                (
                    "booking",
                    models.OneToOneField(
                        help_text="The paid booking",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment",
                        to="bookings.booking",
                    ),
                ),
                (
                    "payer_account",
                    models.ForeignKey(
                        help_text="Account the payment was taken from",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "hospital_account",
                    models.ForeignKey(
                        help_text="Hospital revenue account credited",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "platform_account",
                    models.ForeignKey(
                        help_text="Platform revenue account credited",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="payments.ledgeraccount",
                    ),
                ),
            ],
            options={
                "ordering": ["-paid_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "amount",
                                models.F("hospital_share")
                                + models.F("service_charge_share"),
                            )
                        ),
                        name="booking_payment_shares_sum_to_amount",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="booking_payment_amount_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReconciliationRun",
            fields=[
                *timestamps(),
                uuid_pk(),
                (
                    "started_at",
                    models.DateTimeField(
                        help_text="When this reconciliation run started"
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When this reconciliation run completed (or failed)",
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("running", "Running"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="running",
                        help_text="Current status of this reconciliation run",
                        max_length=20,
                    ),
                ),
                (
                    "accounts_checked",
                    models.PositiveIntegerField(
                        default=0, help_text="Number of ledger accounts compared"
                    ),
                ),
                (
                    "discrepancies_found",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Number of accounts with a balance discrepancy",
                    ),
                ),
                (
                    "computed_total",
                    models.BigIntegerField(
                        default=0,
                        help_text="Sum of balances recomputed from transactions",
                    ),
                ),
                (
                    "stored_total",
                    models.BigIntegerField(
                        default=0, help_text="Sum of cached account balances"
                    ),
                ),
                (
                    "error_message",
                    models.TextField(
                        blank=True, help_text="Error message if the run failed"
                    ),
                ),
            ],
            options={
                "ordering": ["-started_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "started_at"], name="recon_run_status_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="DiscrepancyAlert",
            fields=[
                *timestamps(),
                uuid_pk(),
                (
                    "stored_balance",
                    models.BigIntegerField(
                        help_text="Cached balance when the discrepancy was detected"
                    ),
                ),
                (
                    "computed_balance",
                    models.BigIntegerField(
                        help_text="Balance recomputed from transactions"
                    ),
                ),
                (
                    "discrepancy",
                    models.BigIntegerField(help_text="stored_balance - computed_balance"),
                ),
                (
                    "severity",
                    models.CharField(
                        choices=[("medium", "Medium"), ("high", "High")],
                        db_index=True,
                        help_text="Review priority",
                        max_length=10,
                    ),
                ),
                (
                    "resolved",
                    models.BooleanField(
                        db_index=True,
                        default=False,
                        help_text="Whether an operator has closed this alert",
                    ),
                ),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "resolution_notes",
                    models.TextField(
                        blank=True, help_text="What the operator found and did"
                    ),
                ),
                (
                    "run",
                    models.ForeignKey(
                        help_text="The reconciliation run that raised this alert",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="alerts",
                        to="payments.reconciliationrun",
                    ),
                ),
                (
                    "account",
                    models.ForeignKey(
                        help_text="Account whose balances disagreed",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="discrepancy_alerts",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "resolved_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Operator who closed this alert",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["resolved", "severity"], name="recon_alert_queue_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BalanceCorrection",
            fields=[
                *timestamps(),
                uuid_pk(),
                (
                    "original_balance",
                    models.BigIntegerField(
                        help_text="Cached balance before the correction"
                    ),
                ),
                (
                    "corrected_balance",
                    models.BigIntegerField(
                        help_text="Balance written by the correction"
                    ),
                ),
                (
                    "adjustment",
                    models.BigIntegerField(
                        help_text="corrected_balance - original_balance"
                    ),
                ),
                ("reason", models.TextField(help_text="Why the balance was corrected")),
                (
                    "evidence",
                    models.TextField(
                        blank=True, help_text="References supporting the correction"
                    ),
                ),
                (
                    "account",
                    models.ForeignKey(
                        help_text="Corrected ledger account",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="balance_corrections",
                        to="payments.ledgeraccount",
                    ),
                ),
                (
                    "alert",
                    models.ForeignKey(
                        blank=True,
                        help_text="Alert that prompted this correction",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="corrections",
                        to="payments.discrepancyalert",
                    ),
                ),
                (
                    "corrected_by",
                    models.ForeignKey(
                        help_text="Administrator who made the correction",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
