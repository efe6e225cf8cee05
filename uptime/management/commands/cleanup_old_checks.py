"""
Management command to clean up old probe records.

Usage:
    python manage.py cleanup_old_checks
    python manage.py cleanup_old_checks --dry-run
    python manage.py cleanup_old_checks --days 14

Retention is the only path that removes probe records; the monitoring
service itself never deletes history.
"""
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from uptime.models import ProbeRecord
from uptime.services.scheduler import delete_records_older_than


class Command(BaseCommand):
    help = "Delete probe records older than the retention period"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Retention period in days (overrides settings)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without actually deleting",
        )

    def handle(self, *args, **options):
        retention_days = options["days"]
        if retention_days is None:
            retention_days = getattr(settings, "HEALTH_CHECK_RETENTION_DAYS", 60)

        if options["dry_run"]:
            cutoff_date = timezone.now() - timedelta(days=retention_days)
            count = ProbeRecord.objects.filter(timestamp__lt=cutoff_date).count()
            self.stdout.write(
                f"[DRY RUN] Would delete {count} probe records "
                f"older than {retention_days} days"
            )
            return

        deleted_count = delete_records_older_than(retention_days)
        self.stdout.write(
            self.style.SUCCESS(
                f"Deleted {deleted_count} probe records "
                f"older than {retention_days} days"
            )
        )
