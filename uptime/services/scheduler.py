"""
APScheduler setup for periodic checks and cleanup.

This module configures APScheduler to:
1. Run one check of the monitored endpoint at a fixed interval
2. Clean up old probe records daily
"""
import logging
from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from django.conf import settings
from django.utils import timezone

from uptime.config import get_monitor_config
from uptime.models import ProbeRecord
from uptime.services.service import MonitoringService, build_monitoring_service

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: BackgroundScheduler | None = None


def run_check_cycle(service: MonitoringService | None = None) -> ProbeRecord | None:
    """
    Run a single check.

    Any error is logged and swallowed so the next tick still runs.

    Returns:
        The stored record, or None if the cycle failed
    """
    logger.info("Starting check cycle...")

    try:
        service = service or build_monitoring_service()
        record = service.process_check()
        logger.info(
            f"Check cycle complete: {record.status.upper()} in "
            f"{record.response_time_ms}ms, {record.consecutive_failures} consecutive failures"
        )
        return record

    except Exception as e:
        logger.exception(f"Error in check cycle: {e}")
        return None


def delete_records_older_than(retention_days: int) -> int:
    """Delete probe records older than ``retention_days``; returns the count."""
    cutoff_date = timezone.now() - timedelta(days=retention_days)
    deleted_count, _ = ProbeRecord.objects.filter(timestamp__lt=cutoff_date).delete()
    return deleted_count


def run_cleanup_job():
    """
    Clean up old probe records.

    Runs daily to prevent the database from growing indefinitely.
    Uses the HEALTH_CHECK_RETENTION_DAYS setting (default: 60 days).
    """
    logger.info("Starting cleanup job...")

    try:
        retention_days = getattr(settings, "HEALTH_CHECK_RETENTION_DAYS", 60)
        deleted_count = delete_records_older_than(retention_days)

        if deleted_count > 0:
            logger.info(
                f"Cleanup complete: deleted {deleted_count} records "
                f"older than {retention_days} days"
            )
        else:
            logger.info("Cleanup complete: no old records to delete")

    except Exception as e:
        logger.exception(f"Error in cleanup job: {e}")


def get_scheduler() -> BackgroundScheduler:
    """Get or create the global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler()
    return _scheduler


def start_scheduler(service: MonitoringService | None = None):
    """
    Start the scheduler with check and cleanup jobs.

    The monitor configuration is validated up front, so a misconfigured
    monitor fails here instead of logging an error on every tick.

    Jobs:
    - Check: runs every MONITOR_CHECK_INTERVAL seconds (default: 60)
    - Cleanup: runs daily at 3:00 AM UTC
    """
    config = service.config if service else get_monitor_config()
    service = service or build_monitoring_service(config)

    scheduler = get_scheduler()

    # Job 1: Checks (at most one in flight)
    scheduler.add_job(
        run_check_cycle,
        trigger=IntervalTrigger(seconds=config.check_interval_seconds),
        kwargs={"service": service},
        id="check_cycle",
        name="Periodic Check",
        replace_existing=True,
        max_instances=1,
    )
    logger.info(
        f"Check job configured for {config.service_name}: "
        f"every {config.check_interval_seconds}s"
    )

    # Job 2: Cleanup (runs daily at 3:00 AM UTC)
    scheduler.add_job(
        run_cleanup_job,
        trigger=CronTrigger(hour=3, minute=0, timezone="UTC"),
        id="daily_cleanup",
        name="Daily Cleanup",
        replace_existing=True,
        max_instances=1,
        coalesce=True,  # If missed, only run once when back online
    )
    logger.info("Cleanup job configured: daily at 3:00 AM UTC")

    scheduler.start()
    logger.info("Scheduler started with 2 jobs")

    return scheduler


def stop_scheduler():
    """Stop the scheduler gracefully."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=True)
        _scheduler = None
        logger.info("Scheduler stopped")
