"""
Booking amount calculation.

Splits a booking's total into the hospital's share and the platform's
service charge. All amounts are integer minor units (paisa) and rates are
Decimal fractions; floats never enter the calculation.

Rules:
    total_amount         = base_rate * duration_hours
    service_charge_share = round_half_up(total_amount * service_charge_rate)
    hospital_share       = total_amount - service_charge_share

hospital_share is derived by subtraction so that the two shares always add
up to the total exactly.

Usage:
    from bookings.calculator import compute_amount

    amount = compute_amount(120, 1, Decimal("0.30"))
    amount.total_amount          # 120
    amount.service_charge_share  # 36
    amount.hospital_share        # 84
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from core.exceptions import InvalidInputError
from hospitals.validators import parse_service_charge_rate, validate_base_rate

if TYPE_CHECKING:
    import uuid
    from typing import Any

# Minor units per major unit (paisa per taka)
MINOR_UNITS_PER_MAJOR = 100


@dataclass(frozen=True)
class Money:
    """
    A monetary amount in minor units with its currency.

    Attributes:
        minor_units: Amount in the smallest currency unit (paisa for BDT)
        currency: ISO 4217 currency code

    Example:
        balance = Money(minor_units=12050, currency="bdt")
        str(balance)  # "120.50 BDT"
    """

    minor_units: int
    currency: str = "bdt"

    def __str__(self) -> str:
        """Format in major units (e.g., '120.50 BDT')."""
        major = Decimal(self.minor_units) / MINOR_UNITS_PER_MAJOR
        return f"{major:.2f} {self.currency.upper()}"

    def _check_currency(self, other: Money, operation: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} Money with different currencies: "
                f"{self.currency} and {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        """Add two Money objects (must have same currency)."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "add")
        return Money(self.minor_units + other.minor_units, self.currency)

    def __sub__(self, other: Money) -> Money:
        """Subtract two Money objects (must have same currency)."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other, "subtract")
        return Money(self.minor_units - other.minor_units, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.minor_units, self.currency)


@dataclass(frozen=True)
class BookingAmount:
    """
    Result of splitting a booking total.

    Invariant: total_amount == hospital_share + service_charge_share.
    """

    total_amount: int
    hospital_share: int
    service_charge_share: int

    def __post_init__(self) -> None:
        if self.hospital_share + self.service_charge_share != self.total_amount:
            raise InvalidInputError(
                "Booking shares do not add up to the total",
                details={
                    "total_amount": self.total_amount,
                    "hospital_share": self.hospital_share,
                    "service_charge_share": self.service_charge_share,
                },
            )


@dataclass(frozen=True)
class BookingQuote(BookingAmount):
    """BookingAmount together with the pricing row that produced it."""

    currency: str
    pricing_id: uuid.UUID


def round_half_up(value: Decimal) -> int:
    """Round a Decimal to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_duration(duration_hours: Any) -> int:
    """Return ``duration_hours`` if it is a positive whole number of hours."""
    if (
        not isinstance(duration_hours, int)
        or isinstance(duration_hours, bool)
        or duration_hours <= 0
    ):
        raise InvalidInputError(
            "Duration must be a positive whole number of hours",
            details={"duration_hours": repr(duration_hours)},
        )
    return duration_hours


def compute_amount(
    base_rate: int,
    duration_hours: int,
    service_charge_rate: Decimal | str,
) -> BookingAmount:
    """
    Compute a booking's total and split it between hospital and platform.

    Args:
        base_rate: Price per hour in minor units, positive
        duration_hours: Whole hours booked, positive
        service_charge_rate: Fraction in [0, 1] as Decimal or numeric string

    Returns:
        BookingAmount whose shares add up to the total exactly

    Raises:
        InvalidInputError: For a non-positive base rate or duration, a float
            rate, or a rate outside [0, 1]
    """
    validate_base_rate(base_rate)
    validate_duration(duration_hours)
    rate = parse_service_charge_rate(service_charge_rate)

    total_amount = base_rate * duration_hours
    service_charge_share = round_half_up(Decimal(total_amount) * rate)
    hospital_share = total_amount - service_charge_share

    return BookingAmount(
        total_amount=total_amount,
        hospital_share=hospital_share,
        service_charge_share=service_charge_share,
    )
