"""
Models for the gracewatch uptime monitor.
"""
from django.db import models


class ProbeRecord(models.Model):
    """
    Records the outcome of one probe against the monitored endpoint.

    Rows are append-only: the monitoring service creates exactly one per
    check and never updates them afterwards.
    """

    timestamp = models.DateTimeField(db_index=True)
    up = models.BooleanField()
    response_time_ms = models.PositiveIntegerField()
    error_message = models.TextField(null=True, blank=True)
    status_code = models.PositiveSmallIntegerField(null=True, blank=True)
    consecutive_failures = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-timestamp", "-id"]
        get_latest_by = ["timestamp", "id"]
        indexes = [
            models.Index(fields=["-timestamp"], name="probe_timestamp_idx"),
            models.Index(fields=["up", "timestamp"], name="probe_up_timestamp_idx"),
        ]
        verbose_name = "Probe Record"
        verbose_name_plural = "Probe Records"

    def __str__(self):
        return f"{self.status.upper()} @ {self.timestamp:%Y-%m-%d %H:%M:%S}"

    @property
    def status(self) -> str:
        return "up" if self.up else "down"

    def to_dict(self) -> dict:
        """JSON-serialisable representation used by the HTTP API."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "up": self.up,
            "responseTime": self.response_time_ms,
            "err": self.error_message,
            "statusCode": self.status_code,
            "consecutiveFailures": self.consecutive_failures,
        }
