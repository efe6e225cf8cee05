"""
Typed, validated view of the monitor settings.

Settings are read from the environment by ``config/settings/base.py``;
this module turns the raw values into a :class:`MonitorConfig` and fails
loudly when the monitor is misconfigured.
"""
import json
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULT_EXPECTED_CODES = "200-299"


@dataclass(frozen=True)
class MonitorConfig:
    """Configuration for the single monitored endpoint."""

    service_name: str
    target_url: str
    http_method: str
    ping_timeout_ms: int
    grace_period_failures: int
    check_interval_seconds: int
    expected_codes: tuple[int, ...]
    api_bearer_token: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None

    @property
    def ping_timeout_seconds(self) -> float:
        return self.ping_timeout_ms / 1000


def parse_expected_codes(codes: str) -> tuple[int, ...]:
    """
    Parse expected status codes.

    Supports range notation ("200-299") or a comma-separated list
    ("200,301,302").
    """
    if "-" in codes:
        start_str, _, end_str = codes.partition("-")
        try:
            start, end = int(start_str.strip()), int(end_str.strip())
        except ValueError:
            raise ImproperlyConfigured(f"Invalid expected codes range: {codes}")
        if start > end:
            raise ImproperlyConfigured(f"Invalid expected codes range: {codes}")
        return tuple(range(start, end + 1))

    try:
        return tuple(int(code.strip()) for code in codes.split(","))
    except ValueError:
        raise ImproperlyConfigured(f"Invalid expected codes: {codes}")


def _parse_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ImproperlyConfigured(f"{name} must be an integer, got {value!r}")


def _parse_headers(raw: Any) -> dict[str, str]:
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        headers = json.loads(raw)
    except (TypeError, ValueError):
        raise ImproperlyConfigured("MONITOR_HTTP_HEADERS must be valid JSON")
    if not isinstance(headers, dict):
        raise ImproperlyConfigured("MONITOR_HTTP_HEADERS must be a JSON object")
    return headers


def get_monitor_config() -> MonitorConfig:
    """
    Build and validate the monitor configuration from Django settings.

    Raises:
        ImproperlyConfigured: if a required value is missing or invalid
    """
    target_url = getattr(settings, "MONITOR_TARGET_URL", "")
    if not target_url:
        raise ImproperlyConfigured("MONITOR_TARGET_URL (TARGET_URL) is required")

    api_bearer_token = getattr(settings, "API_BEARER_TOKEN", "")
    if not api_bearer_token:
        raise ImproperlyConfigured("API_BEARER_TOKEN is required")

    ping_timeout = _parse_int(
        "MONITOR_PING_TIMEOUT", getattr(settings, "MONITOR_PING_TIMEOUT", 10000)
    )
    if not 1 <= ping_timeout <= 60000:
        raise ImproperlyConfigured(
            "MONITOR_PING_TIMEOUT must be between 1 and 60000 milliseconds"
        )

    grace_period = _parse_int(
        "MONITOR_GRACE_PERIOD_FAILURES",
        getattr(settings, "MONITOR_GRACE_PERIOD_FAILURES", 3),
    )
    if not 1 <= grace_period <= 10:
        raise ImproperlyConfigured(
            "MONITOR_GRACE_PERIOD_FAILURES must be between 1 and 10"
        )

    check_interval = _parse_int(
        "MONITOR_CHECK_INTERVAL", getattr(settings, "MONITOR_CHECK_INTERVAL", 60)
    )
    if check_interval < 1:
        raise ImproperlyConfigured("MONITOR_CHECK_INTERVAL must be at least 1 second")

    # Anything other than POST falls back to GET
    method = str(getattr(settings, "MONITOR_HTTP_METHOD", "GET") or "GET").upper()
    http_method = "POST" if method == "POST" else "GET"

    expected_codes = parse_expected_codes(
        getattr(settings, "MONITOR_EXPECTED_CODES", "") or DEFAULT_EXPECTED_CODES
    )

    return MonitorConfig(
        service_name=getattr(settings, "MONITOR_SERVICE_NAME", "") or "Service",
        target_url=target_url,
        http_method=http_method,
        ping_timeout_ms=ping_timeout,
        grace_period_failures=grace_period,
        check_interval_seconds=check_interval,
        expected_codes=expected_codes,
        api_bearer_token=api_bearer_token,
        headers=_parse_headers(getattr(settings, "MONITOR_HTTP_HEADERS", "")),
        body=getattr(settings, "MONITOR_HTTP_BODY", None) or None,
    )


def validate_email_settings() -> None:
    """
    Check that email notification settings are complete.

    Email notifications are optional; when ``NOTIFICATION_EMAIL`` is set,
    the SMTP transport must be fully configured.
    """
    notification_email = getattr(settings, "NOTIFICATION_EMAIL", "")
    email_host = getattr(settings, "EMAIL_HOST", "")

    if notification_email and not email_host:
        raise ImproperlyConfigured("EMAIL_HOST is required when NOTIFICATION_EMAIL is set")

    if not email_host:
        return

    missing = [
        name
        for name in ("EMAIL_HOST_USER", "EMAIL_HOST_PASSWORD", "NOTIFICATION_EMAIL")
        if not getattr(settings, name, "")
    ]
    if missing:
        raise ImproperlyConfigured(
            f"SMTP configuration incomplete: {', '.join(missing)} required "
            f"when EMAIL_HOST is set"
        )

    port = _parse_int("EMAIL_PORT", getattr(settings, "EMAIL_PORT", 587))
    if not 1 <= port <= 65535:
        raise ImproperlyConfigured("EMAIL_PORT must be between 1 and 65535")
