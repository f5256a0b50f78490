"""
Django admin configuration for the payments app.

Ledger models are registered in payments.ledger.admin; this module adds
the reconciliation history.
"""

from django.contrib import admin

from payments.ledger.admin import ReadOnlyAdminMixin
from payments.models import BalanceCorrection, DiscrepancyAlert, ReconciliationRun


@admin.register(ReconciliationRun)
class ReconciliationRunAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "id",
        "status",
        "started_at",
        "completed_at",
        "accounts_checked",
        "discrepancies_found",
        "computed_total",
        "stored_total",
    ]
    list_filter = ["status"]
    ordering = ["-started_at"]


@admin.register(DiscrepancyAlert)
class DiscrepancyAlertAdmin(admin.ModelAdmin):
    """
    Review queue for discrepancies.

    Only the resolution fields are editable; use the correct balance action
    in the API to change the account itself.
    """

    list_display = [
        "id",
        "account",
        "discrepancy",
        "severity",
        "resolved",
        "created_at",
    ]
    list_filter = ["severity", "resolved"]
    search_fields = ["id", "account__id", "account__owner_id"]
    readonly_fields = [
        "id",
        "run",
        "account",
        "stored_balance",
        "computed_balance",
        "discrepancy",
        "severity",
        "resolved_at",
        "resolved_by",
        "created_at",
    ]
    ordering = ["resolved", "severity", "-created_at"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(BalanceCorrection)
class BalanceCorrectionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "id",
        "account",
        "original_balance",
        "corrected_balance",
        "adjustment",
        "corrected_by",
        "created_at",
    ]
    search_fields = ["id", "account__id", "reason"]
    ordering = ["-created_at"]
