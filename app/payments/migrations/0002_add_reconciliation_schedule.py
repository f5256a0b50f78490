"""
Add celery-beat schedule for the daily ledger reconciliation.

Runs payments.tasks.run_scheduled_reconciliation every day at 03:00 UTC.
"""

from django.db import migrations

TASK_NAME = "Daily Ledger Reconciliation"


def create_periodic_task(apps, schema_editor):
    """Create the periodic task for the reconciliation run."""
    CrontabSchedule = apps.get_model("django_celery_beat", "CrontabSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = CrontabSchedule.objects.get_or_create(
        minute="0",
        hour="3",
        day_of_week="*",
        day_of_month="*",
        month_of_year="*",
        timezone="UTC",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "payments.tasks.run_scheduled_reconciliation",
            "crontab": schedule,
            "enabled": True,
            "description": (
                "Recomputes every ledger account balance from its transactions "
                "and raises discrepancy alerts. Never changes a balance."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
