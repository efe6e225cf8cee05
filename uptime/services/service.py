"""
Monitoring service: one probe -> grace-period decision -> record -> alerts.
"""
import logging
from datetime import datetime, timedelta

from django.utils import timezone

from uptime.config import MonitorConfig, get_monitor_config, validate_email_settings
from uptime.models import ProbeRecord
from uptime.services.alerter import Notifier, build_notifiers, dispatch_down, dispatch_up
from uptime.services.prober import HttpProber, Prober
from uptime.services.state import Action, advance, describe_state
from uptime.services.stats import Stats, compute_stats
from uptime.services.store import DatabaseStore, Store

logger = logging.getLogger(__name__)

DEFAULT_STATS_WINDOW = timedelta(hours=24)


class MonitoringService:
    """
    Orchestrates checks against a single monitored endpoint.

    The consecutive-failure count is carried on each stored record, so a
    check only ever reads the single most recent record to continue the
    grace-period count.
    """

    def __init__(
        self,
        store: Store,
        prober: Prober,
        notifiers: list[Notifier],
        config: MonitorConfig,
    ):
        self.store = store
        self.prober = prober
        self.notifiers = notifiers
        self.config = config

    def previous_consecutive_failures(self) -> int:
        """Failure count from the most recent record (0 if none)."""
        latest = self.store.most_recent(1)
        return latest[0].consecutive_failures if latest else 0

    def process_check(self) -> ProbeRecord:
        """
        Run one check and persist its outcome.

        Notifier failures are logged and swallowed; store failures
        propagate to the caller.

        Returns:
            The stored ProbeRecord
        """
        service_name = self.config.service_name
        threshold = self.config.grace_period_failures

        outcome = self.prober.check()
        previous = self.previous_consecutive_failures()
        decision = advance(previous, outcome.up, threshold)

        record = self.store.save(
            ProbeRecord(
                timestamp=timezone.now(),
                up=outcome.up,
                response_time_ms=outcome.response_time_ms,
                error_message=outcome.error_message,
                status_code=outcome.status_code,
                consecutive_failures=decision.consecutive_failures,
            )
        )

        logger.info(
            f"Check for {service_name}: {outcome.status.upper()} "
            f"({describe_state(decision.consecutive_failures, threshold)}, "
            f"{decision.consecutive_failures}/{threshold} failures)"
        )

        if decision.action is Action.NOTIFY_DOWN:
            logger.warning(f"Service {service_name} went DOWN")
            dispatch_down(
                self.notifiers,
                service_name,
                decision.consecutive_failures,
                outcome.error_message,
            )
        elif decision.action is Action.NOTIFY_UP:
            logger.info(f"Service {service_name} RECOVERED after {previous} failures")
            dispatch_up(self.notifiers, service_name, previous)

        return record

    def get_stats(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> Stats:
        """
        Statistics for ``[start, end]``.

        Defaults to the last 24 hours when bounds are omitted.
        """
        now = timezone.now()
        end = end or now
        start = start or now - DEFAULT_STATS_WINDOW

        records = self.store.records_in_range(start, end)
        return compute_stats(records, now=now)


def build_monitoring_service(config: MonitorConfig | None = None) -> MonitoringService:
    """
    Wire the service from Django settings.

    Raises:
        ImproperlyConfigured: if the monitor settings are invalid
    """
    config = config or get_monitor_config()
    validate_email_settings()
    return MonitoringService(
        store=DatabaseStore(),
        prober=HttpProber(config),
        notifiers=build_notifiers(),
        config=config,
    )
