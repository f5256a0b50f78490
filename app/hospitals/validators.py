"""
Validation of pricing inputs.

Monetary inputs are integer minor units and rates are Decimal fractions.
Floats are refused outright: 0.1 + 0.2 style drift in a service charge
rate turns into paisa lost or created on every booking.

Usage:
    from hospitals.validators import parse_service_charge_rate, validate_base_rate

    rate = parse_service_charge_rate("0.30")  # Decimal("0.30")
    base = validate_base_rate(12000)
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from core.exceptions import InvalidInputError
from hospitals.models import ResourceType

if TYPE_CHECKING:
    from typing import Any


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_base_rate(value: Any) -> int:
    """Return ``value`` if it is a positive integer amount of minor units."""
    if not _is_int(value) or value <= 0:
        raise InvalidInputError(
            "Base rate must be a positive integer amount of minor units",
            details={"base_rate": repr(value)},
        )
    return value


def parse_service_charge_rate(value: Any) -> Decimal:
    """
    Coerce a service charge rate to Decimal and check it lies in [0, 1].

    Accepts Decimal, int and numeric strings.

    Raises:
        InvalidInputError: For floats, non-numeric values and out-of-range rates
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise InvalidInputError(
            "Service charge rate must be a Decimal or string, not a float",
            details={"service_charge_rate": repr(value)},
        )
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(
            "Service charge rate is not a number",
            details={"service_charge_rate": repr(value)},
        ) from None
    if not rate.is_finite() or rate < 0 or rate > 1:
        raise InvalidInputError(
            "Service charge rate must be between 0 and 1",
            details={"service_charge_rate": str(rate)},
        )
    return rate


def validate_resource_type(value: Any) -> str:
    """Return ``value`` if it names a bookable resource type."""
    if value not in ResourceType.values:
        raise InvalidInputError(
            f"Unknown resource type: {value!r}",
            details={
                "resource_type": str(value),
                "allowed": list(ResourceType.values),
            },
        )
    return value
