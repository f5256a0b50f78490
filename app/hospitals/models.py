"""
Hospital pricing models.

HospitalPricing rows are never edited in place. Publishing a new price
closes the current row (is_active=False, effective_to=now) and inserts a
new one, so past bookings can always be traced to the row they were
priced from.

Usage:
    from hospitals.models import HospitalPricing, ResourceType

    pricing = HospitalPricing.objects.current(hospital_id, ResourceType.ICU)
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class ResourceType(models.TextChoices):
    """
    Bookable hospital resources.

    Values:
        BED: General ward bed
        ICU: Intensive care unit bed
        OPERATION_THEATRE: Operation theatre slot
    """

    BED = "bed", "Bed"
    ICU = "icu", "ICU"
    OPERATION_THEATRE = "operation_theatre", "Operation Theatre"


class HospitalPricingQuerySet(models.QuerySet):
    """Queries over pricing rows."""

    def active(self):
        return self.filter(is_active=True)

    def effective(self, at=None):
        """Rows whose effective window contains ``at`` (default: now)."""
        at = at or timezone.now()
        return self.filter(effective_from__lte=at).filter(
            Q(effective_to__isnull=True) | Q(effective_to__gt=at)
        )

    def for_resource(self, hospital_id, resource_type):
        return self.filter(hospital_id=hospital_id, resource_type=resource_type)

    def resolvable(self, at=None):
        """
        Rows that can price a booking at ``at``.

        Active rows, plus superseded rows whose closing time has not arrived
        yet (a price scheduled for the future leaves the old one in force
        until it starts). Rows switched off by hand have no effective_to and
        drop out immediately.
        """
        return self.effective(at).filter(
            Q(is_active=True) | Q(effective_to__isnull=False)
        )

    def current(self, hospital_id, resource_type, at=None):
        """Return the row that prices the resource at ``at``, or None."""
        return (
            self.resolvable(at)
            .for_resource(hospital_id, resource_type)
            .order_by("-effective_from")
            .first()
        )


class HospitalPricing(UUIDPrimaryKeyMixin, BaseModel):
    """
    Price a hospital charges for one resource type.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        hospital_id: UUID of the hospital (hospital records live elsewhere)
        resource_type: bed, icu or operation_theatre
        base_rate: Price per hour in minor units (paisa), always positive
        service_charge_rate: Platform share of the total, fraction in [0, 1]
        currency: ISO 4217 currency code
        effective_from: When this price starts applying
        effective_to: When this price stopped applying (null while current)
        is_active: Whether this is the current row for the pair
        created_by: Hospital authority who published the price

    Constraints:
        - At most one active row per (hospital_id, resource_type)
        - base_rate > 0
        - 0 <= service_charge_rate <= 1
    """

    hospital_id = models.UUIDField(
        db_index=True,
        help_text="UUID of the hospital this price belongs to",
    )
    resource_type = models.CharField(
        max_length=32,
        choices=ResourceType.choices,
        help_text="Bookable resource this price applies to",
    )
    base_rate = models.PositiveBigIntegerField(
        help_text="Price per hour in minor currency units",
    )
    service_charge_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.30"),
        help_text="Platform service charge as a fraction of the total",
    )
    currency = models.CharField(
        max_length=3,
        default="bdt",
        help_text="ISO 4217 currency code",
    )
    effective_from = models.DateTimeField(
        default=timezone.now,
        help_text="When this price starts applying",
    )
    effective_to = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When this price was superseded",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this is the current price for the resource",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Hospital authority who published this price",
    )

    objects = HospitalPricingQuerySet.as_manager()

    class Meta:
        ordering = ["-effective_from"]
        verbose_name = "hospital pricing"
        verbose_name_plural = "hospital pricing"
        constraints = [
            models.UniqueConstraint(
                fields=["hospital_id", "resource_type"],
                condition=Q(is_active=True),
                name="unique_active_pricing_per_resource",
            ),
            models.CheckConstraint(
                condition=Q(base_rate__gt=0),
                name="pricing_base_rate_positive",
            ),
            models.CheckConstraint(
                condition=Q(service_charge_rate__gte=0)
                & Q(service_charge_rate__lte=1),
                name="pricing_service_charge_rate_range",
            ),
        ]
        indexes = [
            models.Index(
                fields=["hospital_id", "resource_type", "is_active"],
                name="pricing_lookup_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"{self.get_resource_type_display()} @ {self.hospital_id}: "
            f"{self.base_rate} {self.currency.upper()}"
        )
