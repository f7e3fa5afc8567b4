"""
Management command to register the periodic criticality sweep with django-q.

Usage:
    python manage.py setup_criticality_sweep

Creates (or updates) a Schedule entry that runs refresh_all_criticality()
every CRITICALITY_SWEEP_MINUTES minutes. Safe to run repeatedly: it uses
update_or_create.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule


class Command(BaseCommand):
    help = "Register the periodic discipleship criticality sweep with django-q"

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes",
            type=int,
            default=None,
            help="Override CRITICALITY_SWEEP_MINUTES",
        )

    def handle(self, *args, **options):
        minutes = options["minutes"] or settings.CRITICALITY_SWEEP_MINUTES
        schedule, created = Schedule.objects.update_or_create(
            name="discipleship_refresh_criticality",
            defaults={
                "func": "discipleship.services.criticality_sweep.refresh_all_criticality",
                "schedule_type": Schedule.MINUTES,
                "minutes": minutes,
                "repeats": -1,  # run forever
            },
        )
        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(
            f"{verb} periodic task: {schedule.name} (every {minutes} minutes)"
        ))
