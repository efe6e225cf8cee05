"""
Tests for the monitoring service orchestration.
"""
from dataclasses import replace
from datetime import timedelta
from unittest.mock import MagicMock, call

import pytest
from django.utils import timezone

from uptime.models import ProbeRecord
from uptime.services.service import MonitoringService, build_monitoring_service
from uptime.services.store import DatabaseStore


def run_checks(service, count):
    return [service.process_check() for _ in range(count)]


class TestProcessCheck:
    """Tests for MonitoringService.process_check."""

    def test_first_success_sets_zero_failures(self, service, notifier):
        record = service.process_check()

        assert record.up is True
        assert record.response_time_ms == 100
        assert record.status_code == 200
        assert record.error_message is None
        assert record.consecutive_failures == 0
        notifier.notify_down.assert_not_called()
        notifier.notify_up.assert_not_called()

    def test_first_failure_sets_one_failure(self, service, prober, notifier):
        prober.fail("Timeout after 5000ms")

        record = service.process_check()

        assert record.up is False
        assert record.consecutive_failures == 1
        assert record.error_message == "Timeout after 5000ms"
        notifier.notify_down.assert_not_called()

    def test_consecutive_failures_increment(self, service, prober, notifier):
        prober.fail()

        records = run_checks(service, 2)

        assert [r.consecutive_failures for r in records] == [1, 2]
        notifier.notify_down.assert_not_called()

    def test_down_notification_fires_at_threshold(self, service, prober, notifier):
        prober.fail("Connection refused")

        run_checks(service, 2)
        notifier.notify_down.assert_not_called()

        record = service.process_check()

        assert record.consecutive_failures == 3
        notifier.notify_down.assert_called_once_with("Test Service", 3, "Connection refused")

    def test_custom_threshold(self, store, prober, notifier, monitor_config):
        service = MonitoringService(
            store=store,
            prober=prober,
            notifiers=[notifier],
            config=replace(monitor_config, grace_period_failures=5),
        )
        prober.fail()

        run_checks(service, 4)
        notifier.notify_down.assert_not_called()

        service.process_check()
        notifier.notify_down.assert_called_once_with("Test Service", 5, "Timeout")

    def test_sub_threshold_recovery_is_silent(self, service, prober, notifier):
        prober.fail()
        run_checks(service, 2)

        prober.succeed()
        record = service.process_check()

        assert record.consecutive_failures == 0
        notifier.notify_down.assert_not_called()
        notifier.notify_up.assert_not_called()

    def test_recovery_after_alert_notifies_up(self, service, prober, notifier):
        prober.fail()
        run_checks(service, 3)
        notifier.notify_down.assert_called_once()

        prober.succeed()
        record = service.process_check()

        assert record.consecutive_failures == 0
        notifier.notify_up.assert_called_once_with("Test Service", 3)

    def test_no_up_notification_without_failures(self, service, notifier):
        run_checks(service, 2)

        notifier.notify_up.assert_not_called()

    def test_long_outage_alerts_once_each_way(self, service, prober, notifier, store):
        prober.fail()
        for expected in range(1, 11):
            assert service.process_check().consecutive_failures == expected

        notifier.notify_down.assert_called_once_with("Test Service", 3, "Timeout")

        stored = store.most_recent(10)
        assert len(stored) == 10
        assert stored[0].consecutive_failures == 10
        assert stored[9].consecutive_failures == 1

        prober.succeed()
        records = run_checks(service, 4)

        assert records[-1].consecutive_failures == 0
        notifier.notify_up.assert_called_once_with("Test Service", 10)

    def test_all_notifiers_receive_calls(self, store, prober, monitor_config):
        first = MagicMock(spec=["notify_down", "notify_up"])
        second = MagicMock(spec=["notify_down", "notify_up"])
        service = MonitoringService(store, prober, [first, second], monitor_config)
        prober.fail()

        run_checks(service, 3)

        first.notify_down.assert_called_once()
        second.notify_down.assert_called_once()

    def test_failing_notifier_does_not_block_others(self, store, prober, monitor_config):
        broken = MagicMock(spec=["notify_down", "notify_up"])
        broken.notify_down.side_effect = RuntimeError("smtp down")
        broken.notify_up.side_effect = RuntimeError("smtp down")
        working = MagicMock(spec=["notify_down", "notify_up"])
        service = MonitoringService(store, prober, [broken, working], monitor_config)

        prober.fail()
        run_checks(service, 3)
        prober.succeed()
        service.process_check()

        working.notify_down.assert_called_once_with("Test Service", 3, "Timeout")
        working.notify_up.assert_called_once_with("Test Service", 3)
        assert len(store) == 4

    def test_counter_survives_new_service_instance(self, store, prober, notifier, monitor_config):
        """The failure count is read back from the store, not held in memory."""
        prober.fail()
        run_checks(MonitoringService(store, prober, [notifier], monitor_config), 2)

        restarted = MonitoringService(store, prober, [notifier], monitor_config)
        record = restarted.process_check()

        assert record.consecutive_failures == 3
        notifier.notify_down.assert_called_once()

    def test_record_round_trips_through_store(self, service, prober, store):
        prober.fail("Unexpected status code: 503", status_code=503, response_time_ms=250)

        record = service.process_check()
        stored = store.most_recent(1)[0]

        assert stored.timestamp == record.timestamp
        assert stored.up is False
        assert stored.response_time_ms == 250
        assert stored.error_message == "Unexpected status code: 503"
        assert stored.status_code == 503
        assert stored.consecutive_failures == 1

    def test_store_failure_propagates(self, prober, notifier, monitor_config):
        store = MagicMock()
        store.most_recent.return_value = []
        store.save.side_effect = RuntimeError("database is locked")
        service = MonitoringService(store, prober, [notifier], monitor_config)

        with pytest.raises(RuntimeError):
            service.process_check()
        notifier.notify_down.assert_not_called()


@pytest.mark.django_db
class TestProcessCheckWithDatabase:
    def test_round_trip_persistence(self, prober, notifier, monitor_config):
        service = MonitoringService(DatabaseStore(), prober, [notifier], monitor_config)
        prober.fail("Timeout after 5000ms", response_time_ms=5000)

        record = service.process_check()
        stored = DatabaseStore().most_recent(1)[0]

        assert stored.pk == record.pk
        assert stored.timestamp == record.timestamp
        assert stored.up is False
        assert stored.response_time_ms == 5000
        assert stored.error_message == "Timeout after 5000ms"
        assert stored.status_code is None
        assert stored.consecutive_failures == 1

    def test_grace_period_against_database(self, prober, notifier, monitor_config):
        service = MonitoringService(DatabaseStore(), prober, [notifier], monitor_config)
        prober.fail()

        run_checks(service, 4)
        prober.succeed()
        service.process_check()

        assert ProbeRecord.objects.count() == 5
        assert notifier.mock_calls == [
            call.notify_down("Test Service", 3, "Timeout"),
            call.notify_up("Test Service", 4),
        ]

    def test_build_monitoring_service_from_settings(self):
        service = build_monitoring_service()

        assert isinstance(service.store, DatabaseStore)
        assert service.config.service_name == "Test Service"
        assert service.config.grace_period_failures == 3


class TestGetStats:
    """Tests for MonitoringService.get_stats."""

    def test_empty_store(self, service):
        stats = service.get_stats()

        assert stats.total_checks == 0
        assert stats.uptime_percentage == 0
        assert stats.current_status == "down"
        assert stats.incidents == []

    def test_single_check(self, service, prober):
        prober.succeed(response_time_ms=150)
        service.process_check()

        stats = service.get_stats()

        assert stats.total_checks == 1
        assert stats.uptime_percentage == 100
        assert stats.average_response_time == 150
        assert stats.current_status == "up"
        assert stats.last_check_time is not None

    def test_mixed_results(self, service, prober):
        pattern = [True, True, False, True, False, True, True, False, True, True]
        for up in pattern:
            if up:
                prober.succeed()
            else:
                prober.fail()
            service.process_check()

        stats = service.get_stats()

        assert stats.total_checks == 10
        assert stats.successful_checks == 7
        assert stats.failed_checks == 3
        assert stats.uptime_percentage == 70.0
        assert stats.current_status == "up"

    def test_incidents_from_checks(self, service, prober):
        for error in [None, "Error 1", "Error 2", None, None, "Error 3", None]:
            if error is None:
                prober.succeed()
            else:
                prober.fail(error)
            service.process_check()

        incidents = service.get_stats().incidents

        assert len(incidents) == 2
        assert incidents[0].error_message == "Error 3"
        assert incidents[0].end_time is not None
        assert incidents[1].error_message == "Error 1"
        assert incidents[1].end_time is not None

    def test_ongoing_incident(self, service, prober):
        service.process_check()
        prober.fail("Error")
        run_checks(service, 2)

        incidents = service.get_stats().incidents

        assert len(incidents) == 1
        assert incidents[0].end_time is None

    def test_default_window_is_last_24_hours(self, service, store):
        now = timezone.now()
        store.save(ProbeRecord(
            timestamp=now - timedelta(hours=25), up=True, response_time_ms=100,
            consecutive_failures=0,
        ))
        store.save(ProbeRecord(
            timestamp=now - timedelta(hours=1), up=True, response_time_ms=100,
            consecutive_failures=0,
        ))

        assert service.get_stats().total_checks == 1

    def test_custom_time_range(self, service, store):
        now = timezone.now()
        two_hours_ago = now - timedelta(hours=2)
        one_hour_ago = now - timedelta(hours=1)
        for base, count in [(two_hours_ago, 3), (one_hour_ago, 2)]:
            for i in range(count):
                store.save(ProbeRecord(
                    timestamp=base + timedelta(seconds=i), up=True,
                    response_time_ms=100, status_code=200, consecutive_failures=0,
                ))

        stats = service.get_stats(one_hour_ago, now)

        assert stats.total_checks == 2
        assert stats.successful_checks == 2