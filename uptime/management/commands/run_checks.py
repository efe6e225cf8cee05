"""
Management command to run the check scheduler.

Usage:
    python manage.py run_checks
    python manage.py run_checks --once

This starts the APScheduler-based check loop that runs indefinitely
until interrupted (Ctrl+C).
"""
import signal
import sys
import time

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from uptime.services.scheduler import run_check_cycle, start_scheduler, stop_scheduler
from uptime.services.service import build_monitoring_service


class Command(BaseCommand):
    help = "Run the uptime check scheduler"

    def add_arguments(self, parser):
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run a single check and exit",
        )

    def handle(self, *args, **options):
        # A misconfigured monitor must not start
        try:
            service = build_monitoring_service()
        except ImproperlyConfigured as e:
            raise CommandError(f"Configuration error: {e}") from e

        if options["once"]:
            record = run_check_cycle(service)
            if record is None:
                raise CommandError("Check cycle failed, see logs")
            self.stdout.write(
                self.style.SUCCESS(f"Check complete. Status: {record.status.upper()}")
            )
            return

        self.stdout.write(self.style.SUCCESS("Starting check scheduler..."))

        # Set up signal handlers for graceful shutdown
        def signal_handler(signum, frame):
            self.stdout.write("\nShutting down scheduler...")
            stop_scheduler()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        start_scheduler(service)

        self.stdout.write(
            self.style.SUCCESS("Scheduler running. Press Ctrl+C to stop.")
        )

        # Keep the main thread alive
        try:
            while True:
                time.sleep(1)
        except (KeyboardInterrupt, SystemExit):
            self.stdout.write("\nShutting down scheduler...")
            stop_scheduler()
