"""
Serializers for hospital pricing endpoints.
"""

from __future__ import annotations

from rest_framework import serializers

from hospitals.models import HospitalPricing


class HospitalPricingSerializer(serializers.ModelSerializer):
    """Read-only representation of a pricing row."""

    class Meta:
        model = HospitalPricing
        fields = [
            "id",
            "hospital_id",
            "resource_type",
            "base_rate",
            "service_charge_rate",
            "currency",
            "effective_from",
            "effective_to",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class UpdatePricingSerializer(serializers.Serializer):
    """
    Request body for publishing a new price.

    service_charge_rate is parsed as a Decimal string; omitting it applies
    the platform default.
    """

    base_rate = serializers.IntegerField(min_value=1)
    service_charge_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=4,
        min_value=0,
        max_value=1,
        required=False,
    )
    effective_from = serializers.DateTimeField(required=False)
