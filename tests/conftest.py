"""
Pytest configuration and shared fixtures.
"""
from unittest.mock import MagicMock

import pytest

from tests.factories import ProbeOutcomeFactory
from uptime.config import MonitorConfig
from uptime.services.service import MonitoringService
from uptime.services.store import InMemoryStore


class FakeProber:
    """Prober returning a preset outcome; tests swap ``outcome`` between checks."""

    def __init__(self):
        self.outcome = ProbeOutcomeFactory()
        self.calls = 0

    def check(self):
        self.calls += 1
        return self.outcome

    def succeed(self, **kwargs):
        self.outcome = ProbeOutcomeFactory(**kwargs)

    def fail(self, error_message="Timeout", **kwargs):
        self.outcome = ProbeOutcomeFactory(failed=True, error_message=error_message, **kwargs)


@pytest.fixture
def monitor_config():
    """A valid monitor configuration with a grace period of 3."""
    return MonitorConfig(
        service_name="Test Service",
        target_url="https://example.com/healthz",
        http_method="GET",
        ping_timeout_ms=5000,
        grace_period_failures=3,
        check_interval_seconds=60,
        expected_codes=tuple(range(200, 300)),
        api_bearer_token="test-token",
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def notifier():
    """Mock notifier recording notify_down / notify_up calls."""
    return MagicMock(spec=["notify_down", "notify_up"])


@pytest.fixture
def service(store, prober, notifier, monitor_config):
    return MonitoringService(
        store=store,
        prober=prober,
        notifiers=[notifier],
        config=monitor_config,
    )
