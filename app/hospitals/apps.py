"""
Hospitals app configuration.
"""

from django.apps import AppConfig


class HospitalsConfig(AppConfig):
    """Configuration for the hospitals application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "hospitals"
    verbose_name = "Hospital Pricing"
