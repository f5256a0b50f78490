import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="HospitalPricing",
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
                    models.UUIDField(
                        db_index=True,
                        help_text="UUID of the hospital this price belongs to",
                    ),
                ),
                (
                    "resource_type",
                    models.CharField(
                        choices=[
                            ("bed", "Bed"),
                            ("icu", "ICU"),
                            ("operation_theatre", "Operation Theatre"),
                        ],
                        help_text="Bookable resource this price applies to",
                        max_length=32,
                    ),
                ),
                (
                    "base_rate",
                    models.PositiveBigIntegerField(
                        help_text="Price per hour in minor currency units"
                    ),
                ),
                (
                    "service_charge_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0.30"),
                        help_text="Platform service charge as a fraction of the total",
                        max_digits=5,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        default="bdt",
                        help_text="ISO 4217 currency code",
                        max_length=3,
                    ),
                ),
                (
                    "effective_from",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When this price starts applying",
                    ),
                ),
                (
                    "effective_to",
                    models.DateTimeField(
                        blank=True,
                        help_text="When this price was superseded",
                        null=True,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        db_index=True,
                        default=True,
                        help_text="Whether this is the current price for the resource",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Hospital authority who published this price",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "hospital pricing",
                "verbose_name_plural": "hospital pricing",
                "ordering": ["-effective_from"],
                "indexes": [
                    models.Index(
                        fields=["hospital_id", "resource_type", "is_active"],
                        name="pricing_lookup_idx",
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("hospital_id", "resource_type"),
                        name="unique_active_pricing_per_resource",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("base_rate__gt", 0)),
                        name="pricing_base_rate_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("service_charge_rate__gte", 0),
                            ("service_charge_rate__lte", 1),
                        ),
                        name="pricing_service_charge_rate_range",
                    ),
                ],
            },
        ),
    ]
