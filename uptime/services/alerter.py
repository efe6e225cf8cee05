"""
Notification channels for grace-period alerts.

Every channel exposes ``notify_down`` and ``notify_up``. Channels raise on
delivery failure; ``dispatch_down``/``dispatch_up`` call each configured
channel independently so one broken channel never silences the others.
"""
import logging
from typing import Protocol

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone
from slack_sdk.webhook import WebhookClient

from uptime.services.reports import format_down_message, format_up_message

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """A notification channel failed to deliver a message."""


class Notifier(Protocol):
    def notify_down(
        self, service_name: str, consecutive_failures: int, last_error: str | None
    ) -> None: ...

    def notify_up(self, service_name: str, downtime_checks: int) -> None: ...


class ConsoleNotifier:
    """Writes notifications to the log."""

    def notify_down(self, service_name, consecutive_failures, last_error):
        logger.warning(
            f"[NOTIFICATION] {service_name} is DOWN - {consecutive_failures} "
            f"consecutive failures - Last error: {last_error}"
        )

    def notify_up(self, service_name, downtime_checks):
        logger.info(
            f"[NOTIFICATION] {service_name} is UP - Was down for {downtime_checks} checks"
        )


class SlackNotifier:
    """
    Sends Block Kit messages to a Slack incoming webhook.
    """

    def __init__(self, webhook_url: str, status_page_url: str = ""):
        self.webhook_url = webhook_url
        self.status_page_url = status_page_url

    def notify_down(self, service_name, consecutive_failures, last_error):
        self._send(
            text=f"🔴 Service Down: {service_name}",
            blocks=self._build_down_alert(service_name, consecutive_failures, last_error),
        )

    def notify_up(self, service_name, downtime_checks):
        self._send(
            text=f"🟢 Service Recovered: {service_name}",
            blocks=self._build_recovery_alert(service_name, downtime_checks),
        )

    def _send(self, text: str, blocks: list[dict]) -> None:
        client = WebhookClient(self.webhook_url)
        response = client.send(text=text, blocks=blocks)

        if response.status_code != 200:
            raise NotificationError(
                f"Slack alert failed: {response.status_code} - {response.body}"
            )
        logger.info(f"Slack alert sent: {text}")

    def _context_block(self) -> list[dict]:
        if not self.status_page_url:
            return []
        return [
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": f"<{self.status_page_url}|View Status Page>",
                    },
                ],
            },
        ]

    def _build_down_alert(
        self, service_name: str, consecutive_failures: int, last_error: str | None
    ) -> list[dict]:
        """Build Block Kit blocks for a service down alert."""
        timestamp = timezone.now().strftime("%Y-%m-%d %H:%M:%S UTC")
        error = (last_error or "")[:100] or "N/A"

        return [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"🔴 Service Down: {service_name}",
                    "emoji": True,
                },
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": "*Status:*\nDOWN"},
                    {"type": "mrkdwn", "text": f"*Since:*\n{timestamp}"},
                    {
                        "type": "mrkdwn",
                        "text": f"*Consecutive Failures:*\n{consecutive_failures}",
                    },
                    {"type": "mrkdwn", "text": f"*Error:*\n{error}"},
                ],
            },
            *self._context_block(),
        ]

    def _build_recovery_alert(self, service_name: str, downtime_checks: int) -> list[dict]:
        """Build Block Kit blocks for a service recovery alert."""
        timestamp = timezone.now().strftime("%Y-%m-%d %H:%M:%S UTC")

        return [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"🟢 Service Recovered: {service_name}",
                    "emoji": True,
                },
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": "*Status:*\nUP"},
                    {"type": "mrkdwn", "text": f"*Recovered:*\n{timestamp}"},
                    {
                        "type": "mrkdwn",
                        "text": f"*Failed Checks:*\n{downtime_checks}",
                    },
                ],
            },
            *self._context_block(),
        ]


class EmailNotifier:
    """Sends plain-text emails through Django's configured email backend."""

    def __init__(self, recipient: str, from_email: str | None = None):
        self.recipient = recipient
        self.from_email = from_email

    def notify_down(self, service_name, consecutive_failures, last_error):
        self._send(
            f"[DOWN] {service_name} is DOWN",
            format_down_message(service_name, consecutive_failures, last_error),
        )

    def notify_up(self, service_name, downtime_checks):
        self._send(
            f"[UP] {service_name} is UP",
            format_up_message(service_name, downtime_checks),
        )

    def _send(self, subject: str, body: str) -> None:
        try:
            send_mail(subject, body, self.from_email, [self.recipient], fail_silently=False)
        except Exception as e:
            raise NotificationError(f"Email to {self.recipient} failed: {e}") from e
        logger.info(f"Email notification sent to {self.recipient}: {subject}")


def build_notifiers() -> list[Notifier]:
    """
    Build the configured notification channels.

    The console channel is always present; Slack and email are added
    when their settings are filled in.
    """
    notifiers: list[Notifier] = [ConsoleNotifier()]

    webhook_url = getattr(settings, "SLACK_WEBHOOK_URL", "")
    if webhook_url:
        notifiers.append(
            SlackNotifier(webhook_url, getattr(settings, "STATUS_PAGE_URL", ""))
        )

    recipient = getattr(settings, "NOTIFICATION_EMAIL", "")
    if recipient:
        notifiers.append(
            EmailNotifier(recipient, getattr(settings, "DEFAULT_FROM_EMAIL", None))
        )

    return notifiers


def dispatch_down(
    notifiers: list[Notifier],
    service_name: str,
    consecutive_failures: int,
    last_error: str | None,
) -> int:
    """
    Send a DOWN notification through every channel.

    Returns:
        Number of channels that delivered successfully
    """
    delivered = 0
    for notifier in notifiers:
        try:
            notifier.notify_down(service_name, consecutive_failures, last_error)
            delivered += 1
        except Exception:
            logger.exception(
                f"DOWN notification via {type(notifier).__name__} failed for {service_name}"
            )
    return delivered


def dispatch_up(notifiers: list[Notifier], service_name: str, downtime_checks: int) -> int:
    """
    Send an UP notification through every channel.

    Returns:
        Number of channels that delivered successfully
    """
    delivered = 0
    for notifier in notifiers:
        try:
            notifier.notify_up(service_name, downtime_checks)
            delivered += 1
        except Exception:
            logger.exception(
                f"UP notification via {type(notifier).__name__} failed for {service_name}"
            )
    return delivered
