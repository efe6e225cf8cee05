"""
Management command to print a stats report.

Usage:
    python manage.py show_stats
    python manage.py show_stats --hours 168
"""
from datetime import timedelta

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from uptime.services.reports import format_stats_message
from uptime.services.service import build_monitoring_service


class Command(BaseCommand):
    help = "Print uptime statistics and incidents for a recent window"

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=24,
            help="Size of the window ending now, in hours (default: 24)",
        )

    def handle(self, *args, **options):
        hours = options["hours"]
        if hours < 1:
            raise CommandError("--hours must be at least 1")

        try:
            service = build_monitoring_service()
        except ImproperlyConfigured as e:
            raise CommandError(f"Configuration error: {e}") from e

        end = timezone.now()
        start = end - timedelta(hours=hours)
        stats = service.get_stats(start, end)

        time_range = f"{start:%Y-%m-%d %H:%M} - {end:%Y-%m-%d %H:%M} UTC"
        self.stdout.write(
            format_stats_message(service.config.service_name, stats, time_range)
        )
