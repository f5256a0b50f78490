"""
Celery configuration for the RapidCare billing core.

Celery runs the periodic ledger reconciliation and on-demand single-account
reconciliations outside the request cycle. The schedule itself lives in the
database (django-celery-beat DatabaseScheduler) and is created by a payments
data migration.

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all installed Django apps.

Usage:
    from payments.tasks import reconcile_account

    reconcile_account.delay(str(account.id))

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Looks for a tasks.py module in each installed app
app.autodiscover_tasks()
