"""
Django admin configuration for bookings.

Amounts and states are read-only: amounts are fixed at creation and states
only move through BookingService and the payment ledger.
"""

from django.contrib import admin

from bookings.models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin for bookings with amounts and FSM states locked."""

    list_display = [
        "id",
        "patient",
        "hospital_id",
        "resource_type",
        "scheduled_date",
        "status",
        "payment_status",
        "total_amount",
        "currency",
    ]
    list_filter = ["status", "payment_status", "resource_type"]
    search_fields = ["id", "hospital_id", "patient__username"]
    readonly_fields = [
        "id",
        "status",
        "payment_status",
        "total_amount",
        "hospital_share",
        "service_charge_share",
        "currency",
        "pricing",
        "paid_at",
        "refunded_at",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
