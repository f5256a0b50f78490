"""
Serializers for booking endpoints.
"""

from __future__ import annotations

from rest_framework import serializers

from bookings.models import Booking
from hospitals.models import ResourceType


class QuoteRequestSerializer(serializers.Serializer):
    """Request body for a price quote."""

    hospital_id = serializers.UUIDField()
    resource_type = serializers.ChoiceField(choices=ResourceType.choices)
    duration_hours = serializers.IntegerField(min_value=1)


class BookingAmountSerializer(serializers.Serializer):
    """Amounts of a booking, in minor units."""

    total_amount = serializers.IntegerField()
    hospital_share = serializers.IntegerField()
    service_charge_share = serializers.IntegerField()


class BookingQuoteSerializer(BookingAmountSerializer):
    """Quoted amounts with the currency and pricing row they came from."""

    currency = serializers.CharField()
    pricing_id = serializers.UUIDField()


class CreateBookingSerializer(QuoteRequestSerializer):
    """Request body for creating a booking."""

    scheduled_date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Read-only representation of a booking."""

    class Meta:
        model = Booking
        fields = [
            "id",
            "patient",
            "hospital_id",
            "resource_type",
            "scheduled_date",
            "duration_hours",
            "status",
            "payment_status",
            "total_amount",
            "hospital_share",
            "service_charge_share",
            "currency",
            "pricing",
            "paid_at",
            "refunded_at",
            "notes",
            "created_at",
        ]
        read_only_fields = fields
