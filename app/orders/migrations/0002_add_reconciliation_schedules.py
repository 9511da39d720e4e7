"""
Add celery-beat schedules for the order reconciliation sweeps.

- auto_release_delivered_orders every 10 minutes: completes delivered orders
  whose buyer never confirmed satisfaction and releases their escrow.
- auto_cancel_stale_orders every 30 minutes: cancels orders left unpaid
  past the payment window.
"""

from django.db import migrations

SCHEDULES = [
    {
        "name": "Auto-release Delivered Orders",
        "task": "orders.tasks.auto_release_delivered_orders",
        "every": 10,
        "description": (
            "Completes delivered orders past the auto-release window and "
            "releases their held escrow to the seller."
        ),
    },
    {
        "name": "Auto-cancel Stale Pending Orders",
        "task": "orders.tasks.auto_cancel_stale_orders",
        "every": 30,
        "description": "Cancels orders still unpaid 12 hours after creation.",
    },
]


def create_periodic_tasks(apps, schema_editor):
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    for entry in SCHEDULES:
        schedule, _ = IntervalSchedule.objects.get_or_create(
            every=entry["every"],
            period="minutes",
        )
        PeriodicTask.objects.get_or_create(
            name=entry["name"],
            defaults={
                "task": entry["task"],
                "interval": schedule,
                "enabled": True,
                "description": entry["description"],
            },
        )


def remove_periodic_tasks(apps, schema_editor):
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(
        name__in=[entry["name"] for entry in SCHEDULES],
    ).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("orders", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
