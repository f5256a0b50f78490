"""
Factory Boy factories for hospital pricing.

Usage:
    from hospitals.tests.factories import HospitalPricingFactory

    pricing = HospitalPricingFactory(resource_type=ResourceType.ICU, base_rate=60000)
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import factory
from django.utils import timezone

from hospitals.models import HospitalPricing, ResourceType


class HospitalPricingFactory(factory.django.DjangoModelFactory):
    """
    Factory for HospitalPricing.

    Default is an active bed price of 120 paisa/hour with a 30% service
    charge, effective from one hour ago.
    """

    class Meta:
        model = HospitalPricing
        skip_postgeneration_save = True

    hospital_id = factory.LazyFunction(uuid.uuid4)
    resource_type = ResourceType.BED
    base_rate = 120
    service_charge_rate = Decimal("0.30")
    currency = "bdt"
    effective_from = factory.LazyFunction(
        lambda: timezone.now() - timedelta(hours=1)
    )
    is_active = True
