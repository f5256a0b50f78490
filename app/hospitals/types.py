"""
Data types returned by the pricing resolver.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Rate:
    """
    The rate the booking flow should charge for one hospital resource.

    Attributes:
        base_rate: Price per hour in minor units (paisa)
        service_charge_rate: Platform's share as a fraction in [0, 1]
        currency: ISO 4217 currency code
        pricing_id: HospitalPricing row the rate was read from
    """

    base_rate: int
    service_charge_rate: Decimal
    currency: str
    pricing_id: uuid.UUID
