import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("hospitals", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
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
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "hospital_id",
                    models.UUIDField(db_index=True, help_text="UUID of the hospital"),
                ),
                (
                    "resource_type",
                    models.CharField(
                        choices=[
                            ("bed", "Bed"),
                            ("icu", "ICU"),
                            ("operation_theatre", "Operation Theatre"),
                        ],
                        help_text="Requested resource",
                        max_length=32,
                    ),
                ),
                (
                    "scheduled_date",
                    models.DateField(help_text="Day the resource is needed"),
                ),
                (
                    "duration_hours",
                    models.PositiveIntegerField(help_text="Whole hours booked"),
                ),
                (
                    "notes",
                    models.TextField(
                        blank=True, default="", help_text="Free text from the patient"
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("declined", "Declined"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Workflow state (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "payment_status",
                    django_fsm.FSMField(
                        choices=[
                            ("unpaid", "Unpaid"),
                            ("paid", "Paid"),
                            ("refunded", "Refunded"),
                        ],
                        db_index=True,
                        default="unpaid",
                        help_text="Payment state (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "total_amount",
                    models.PositiveBigIntegerField(
                        help_text="Total charge in minor currency units"
                    ),
                ),
                (
                    "hospital_share",
                    models.PositiveBigIntegerField(
                        help_text="Hospital's part of the total"
                    ),
                ),
                (
                    "service_charge_share",
                    models.PositiveBigIntegerField(
                        help_text="Platform service charge part of the total"
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="bdt", help_text="ISO 4217 currency code", max_length=3
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "patient",
                    models.ForeignKey(
                        help_text="User who requested the booking",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "pricing",
                    models.ForeignKey(
                        blank=True,
                        help_text="Pricing row the amounts were computed from",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="hospitals.hospitalpricing",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["hospital_id", "status"],
                        name="booking_hospital_status_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            (
                                "total_amount",
                                models.F("hospital_share")
                                + models.F("service_charge_share"),
                            )
                        ),
                        name="booking_shares_sum_to_total",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("duration_hours__gt", 0)),
                        name="booking_duration_positive",
                    ),
                ],
            },
        ),
    ]
