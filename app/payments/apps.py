"""
Payments app configuration.

This app provides the money side of bookings:
- Double-entry ledger of accounts, transactions and booking payments
- Payment and refund submission
- Reconciliation of cached balances, with alerts and audited corrections
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
