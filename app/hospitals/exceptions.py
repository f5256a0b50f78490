"""
Exceptions raised by hospital pricing lookups and updates.
"""

from __future__ import annotations

from core.exceptions import NotFoundError


class PricingNotFoundError(NotFoundError):
    """
    No active, currently effective pricing row for a hospital/resource pair.

    Example:
        raise PricingNotFoundError(
            "No active pricing for icu at hospital ...",
            details={"hospital_id": str(hospital_id), "resource_type": "icu"},
        )
    """

    default_error_code: str = "PRICING_NOT_FOUND"
