"""
Django admin configuration for hospital pricing.

Pricing rows are history: new prices are published through
PricingService.update_pricing(), so the admin only lists and inspects rows.
"""

from django.contrib import admin

from hospitals.models import HospitalPricing


@admin.register(HospitalPricing)
class HospitalPricingAdmin(admin.ModelAdmin):
    """Read-only admin for pricing rows."""

    list_display = [
        "hospital_id",
        "resource_type",
        "base_rate",
        "service_charge_rate",
        "currency",
        "effective_from",
        "effective_to",
        "is_active",
    ]
    list_filter = ["resource_type", "is_active", "currency"]
    search_fields = ["hospital_id"]
    ordering = ["-effective_from"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
