"""
Pricing resolver and the hospital authority write path.

PricingService.get_rate() is a pure read used by the booking flow.
PricingService.update_pricing() closes the current row and publishes a new
one in a single transaction, so the active-row uniqueness constraint holds
at every commit.

Usage:
    from hospitals.services import PricingService

    rate = PricingService.get_rate(hospital_id, "icu")
    rate.base_rate            # 60000
    rate.service_charge_rate  # Decimal("0.30")
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import ConflictError, InvalidInputError
from core.services import BaseService
from hospitals.exceptions import PricingNotFoundError
from hospitals.models import HospitalPricing, ResourceType
from hospitals.types import Rate
from hospitals.validators import (
    parse_service_charge_rate,
    validate_base_rate,
    validate_resource_type,
)

if TYPE_CHECKING:
    import uuid
    from datetime import datetime
    from decimal import Decimal

logger = logging.getLogger(__name__)

# Clock skew allowed between a caller computing "now" and this service
PAST_START_TOLERANCE = timedelta(minutes=1)


class PricingService(BaseService):
    """
    Read and publish hospital resource prices.

    All methods are class methods; there is no instance state.
    """

    @classmethod
    def get_rate(cls, hospital_id: uuid.UUID, resource_type: str) -> Rate:
        """
        Resolve the rate currently charged for a hospital resource.

        Args:
            hospital_id: UUID of the hospital
            resource_type: One of ResourceType values

        Returns:
            Rate read from the latest effective pricing row

        Raises:
            InvalidInputError: If resource_type is not a known resource
            PricingNotFoundError: If no pricing row is currently in force
        """
        validate_resource_type(resource_type)

        pricing = HospitalPricing.objects.current(hospital_id, resource_type)
        if pricing is None:
            raise PricingNotFoundError(
                f"No active pricing for {resource_type} at hospital {hospital_id}",
                details={
                    "hospital_id": str(hospital_id),
                    "resource_type": resource_type,
                },
            )

        return Rate(
            base_rate=pricing.base_rate,
            service_charge_rate=pricing.service_charge_rate,
            currency=pricing.currency,
            pricing_id=pricing.id,
        )

    @classmethod
    def update_pricing(
        cls,
        hospital_id: uuid.UUID,
        resource_type: str,
        base_rate: int,
        service_charge_rate: Decimal | str | None = None,
        created_by=None,
        effective_from: datetime | None = None,
    ) -> HospitalPricing:
        """
        Publish a new price for a hospital resource.

        The current row is closed (is_active=False, effective_to set to the
        new row's start) and the new row inserted in one transaction. When
        effective_from lies in the future the old price keeps applying until
        then.

        Args:
            hospital_id: UUID of the hospital
            resource_type: One of ResourceType values
            base_rate: Price per hour in minor units, positive
            service_charge_rate: Fraction in [0, 1]; defaults to
                settings.DEFAULT_SERVICE_CHARGE_RATE
            created_by: Hospital authority publishing the price
            effective_from: Start of the new price (default: now)

        Returns:
            The newly created HospitalPricing row

        Raises:
            InvalidInputError: For bad rates, resource types or a start in the past
            ConflictError: If another update for the same resource won the race
        """
        validate_resource_type(resource_type)
        validate_base_rate(base_rate)
        if service_charge_rate is None:
            service_charge_rate = settings.DEFAULT_SERVICE_CHARGE_RATE
        rate = parse_service_charge_rate(service_charge_rate)

        now = timezone.now()
        starts_at = effective_from or now
        if starts_at < now - PAST_START_TOLERANCE:
            raise InvalidInputError(
                "Pricing cannot take effect in the past",
                details={"effective_from": starts_at.isoformat()},
            )

        try:
            with transaction.atomic():
                previous = list(
                    HospitalPricing.objects.select_for_update()
                    .active()
                    .for_resource(hospital_id, resource_type)
                )
                for row in previous:
                    row.is_active = False
                    row.effective_to = starts_at
                    row.save(
                        update_fields=["is_active", "effective_to", "updated_at"]
                    )

                pricing = HospitalPricing.objects.create(
                    hospital_id=hospital_id,
                    resource_type=resource_type,
                    base_rate=base_rate,
                    service_charge_rate=rate,
                    currency=settings.BILLING_CURRENCY,
                    effective_from=starts_at,
                    created_by=created_by,
                )
        except IntegrityError as e:
            raise ConflictError(
                "Pricing for this resource was updated concurrently",
                error_code="PRICING_CONFLICT",
                details={
                    "hospital_id": str(hospital_id),
                    "resource_type": resource_type,
                },
            ) from e

        logger.info(
            "Hospital pricing updated",
            extra={
                "hospital_id": str(hospital_id),
                "resource_type": resource_type,
                "pricing_id": str(pricing.id),
                "base_rate": base_rate,
                "service_charge_rate": str(rate),
                "superseded": [str(row.id) for row in previous],
            },
        )
        return pricing

    @classmethod
    def get_pricing_history(
        cls,
        hospital_id: uuid.UUID,
        resource_type: str | None = None,
        limit: int = 10,
    ) -> list[HospitalPricing]:
        """
        Return pricing rows for a hospital, newest first.

        Args:
            hospital_id: UUID of the hospital
            resource_type: Restrict to one resource type (optional)
            limit: Maximum rows to return
        """
        queryset = HospitalPricing.objects.filter(hospital_id=hospital_id)
        if resource_type is not None:
            validate_resource_type(resource_type)
            queryset = queryset.filter(resource_type=resource_type)
        return list(queryset.order_by("-effective_from", "-created_at")[:limit])

    @classmethod
    def get_hospital_pricing(cls, hospital_id: uuid.UUID) -> list[HospitalPricing]:
        """Return the row currently in force for each priced resource type."""
        rows = []
        for resource_type in ResourceType.values:
            pricing = HospitalPricing.objects.current(hospital_id, resource_type)
            if pricing is not None:
                rows.append(pricing)
        return rows
