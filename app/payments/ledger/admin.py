"""
Django admin configuration for ledger models.

Transactions and booking payments are read-only here: they are written
only by LedgerService, and a wrong transaction is undone by posting a
reversal. Account balances are read-only too; corrections go through
ReconciliationService.correct_balance so they leave an audit record.
"""

from django.contrib import admin

from .models import BookingPayment, LedgerAccount, LedgerTransaction


class ReadOnlyAdminMixin:
    """Disable add, change and delete in the admin."""

    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(LedgerAccount)
class LedgerAccountAdmin(admin.ModelAdmin):
    """
    Admin configuration for LedgerAccount.

    Shows the cached balance; the computed balance costs an aggregate query
    per row so it is only shown on the detail page.
    """

    list_display = [
        "id",
        "type",
        "owner_id",
        "currency",
        "balance",
        "is_active",
        "allow_negative",
        "created_at",
    ]
    list_filter = ["type", "currency", "is_active", "allow_negative"]
    search_fields = ["id", "owner_id"]
    readonly_fields = [
        "id",
        "type",
        "owner_id",
        "currency",
        "balance",
        "computed_balance_display",
        "created_at",
    ]
    ordering = ["-created_at"]

    fieldsets = (
        (None, {"fields": ("id", "type", "owner_id", "currency")}),
        ("Configuration", {"fields": ("allow_negative", "is_active")}),
        ("Balance", {"fields": ("balance", "computed_balance_display")}),
        ("Timestamps", {"fields": ("created_at",)}),
    )

    @admin.display(description="Computed balance")
    def computed_balance_display(self, obj: LedgerAccount) -> int:
        return obj.computed_balance()

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(LedgerTransaction)
class LedgerTransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Immutable money movements."""

    list_display = [
        "id",
        "created_at",
        "kind",
        "amount",
        "currency",
        "from_account",
        "to_account",
        "booking",
        "created_by",
    ]
    list_filter = ["kind", "currency", "created_at"]
    search_fields = ["id", "idempotency_key", "booking__id", "description"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]


@admin.register(BookingPayment)
class BookingPaymentAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "id",
        "booking",
        "amount",
        "hospital_share",
        "service_charge_share",
        "currency",
        "paid_at",
        "refunded_at",
    ]
    list_filter = ["currency", "paid_at"]
    search_fields = ["id", "booking__id"]
    ordering = ["-paid_at"]
