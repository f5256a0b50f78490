"""
Tests for the booking amount calculator and Money.

Covers:
- Reference scenarios (120 and 600 at 30%)
- Round-half-up of the service charge
- The shares-sum-to-total invariant over many seeded inputs
- Input validation
"""

import random
from decimal import Decimal

import pytest

from bookings.calculator import (
    BookingAmount,
    Money,
    compute_amount,
    round_half_up,
)
from core.exceptions import InvalidInputError


class TestComputeAmount:
    """Tests for compute_amount()."""

    def test_bed_one_hour_at_thirty_percent(self):
        """120 at 30% splits into 84 hospital and 36 service charge."""
        amount = compute_amount(120, 1, Decimal("0.30"))

        assert amount == BookingAmount(
            total_amount=120, hospital_share=84, service_charge_share=36
        )

    def test_icu_one_hour_at_thirty_percent(self):
        """600 at 30% splits into 420 hospital and 180 service charge."""
        amount = compute_amount(600, 1, Decimal("0.30"))

        assert amount.total_amount == 600
        assert amount.service_charge_share == 180
        assert amount.hospital_share == 420

    def test_total_is_linear_in_duration(self):
        assert compute_amount(120, 5, "0.30").total_amount == 600

    def test_half_rounds_up(self):
        """15 * 0.30 = 4.5 rounds to 5, leaving 10 for the hospital."""
        amount = compute_amount(15, 1, "0.30")

        assert amount.service_charge_share == 5
        assert amount.hospital_share == 10

    def test_below_half_rounds_down(self):
        """13 * 0.30 = 3.9 rounds to 4; 11 * 0.30 = 3.3 rounds to 3."""
        assert compute_amount(13, 1, "0.30").service_charge_share == 4
        assert compute_amount(11, 1, "0.30").service_charge_share == 3

    def test_zero_rate_gives_hospital_everything(self):
        amount = compute_amount(500, 2, "0")

        assert amount.service_charge_share == 0
        assert amount.hospital_share == 1000

    def test_full_rate_gives_platform_everything(self):
        amount = compute_amount(500, 2, Decimal("1"))

        assert amount.service_charge_share == 1000
        assert amount.hospital_share == 0

    @pytest.mark.parametrize("seed", range(5))
    def test_shares_always_sum_to_total(self, seed):
        """No rounding leakage for any valid input."""
        rng = random.Random(seed)
        for _ in range(200):
            base_rate = rng.randint(1, 10_000_000)
            duration = rng.randint(1, 720)
            rate = Decimal(rng.randint(0, 10_000)) / Decimal(10_000)

            amount = compute_amount(base_rate, duration, rate)

            assert amount.total_amount == base_rate * duration
            assert (
                amount.hospital_share + amount.service_charge_share
                == amount.total_amount
            )
            assert 0 <= amount.service_charge_share <= amount.total_amount

    @pytest.mark.parametrize("duration", [0, -1, 1.5, "2", None, True])
    def test_invalid_duration_rejected(self, duration):
        with pytest.raises(InvalidInputError) as exc_info:
            compute_amount(120, duration, "0.30")

        assert exc_info.value.error_code == "INVALID_INPUT"

    @pytest.mark.parametrize("rate", ["-0.01", "1.01", "2", 0.3, "abc", "NaN"])
    def test_invalid_rate_rejected(self, rate):
        with pytest.raises(InvalidInputError):
            compute_amount(120, 1, rate)

    @pytest.mark.parametrize("base_rate", [0, -120, 120.0, "120"])
    def test_invalid_base_rate_rejected(self, base_rate):
        with pytest.raises(InvalidInputError):
            compute_amount(base_rate, 1, "0.30")

    def test_inconsistent_amount_rejected(self):
        with pytest.raises(InvalidInputError):
            BookingAmount(total_amount=120, hospital_share=84, service_charge_share=35)


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [("0.5", 1), ("1.5", 2), ("2.5", 3), ("2.4999", 2), ("36.0", 36)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(Decimal(value)) == expected


class TestMoney:
    """Tests for the Money value object."""

    def test_str_in_major_units(self):
        assert str(Money(12050, "bdt")) == "120.50 BDT"

    def test_arithmetic(self):
        assert Money(100) + Money(20) == Money(120)
        assert Money(100) - Money(120) == Money(-20)
        assert -Money(5) == Money(-5)

    def test_mixed_currency_refused(self):
        with pytest.raises(ValueError):
            Money(100, "bdt") + Money(100, "usd")
