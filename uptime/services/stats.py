"""
Aggregate statistics and incident segmentation over probe history.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from django.utils import timezone

from uptime.models import ProbeRecord

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"


def round_half_up(value: float, places: int = 0) -> float:
    """Round with halves going up (2.5 -> 3), unlike the built-in round()."""
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def _minutes_between(start: datetime, end: datetime) -> int:
    return int(round_half_up((end - start).total_seconds() / 60))


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class Incident:
    """A maximal run of failing probes."""

    start_time: datetime
    end_time: datetime | None
    duration_minutes: int
    error_message: str

    @property
    def is_ongoing(self) -> bool:
        return self.end_time is None

    def to_dict(self) -> dict:
        return {
            "startTime": _isoformat(self.start_time),
            "endTime": _isoformat(self.end_time),
            "durationMinutes": self.duration_minutes,
            "errorMessage": self.error_message,
        }


@dataclass
class Stats:
    """Statistics for one closed time window."""

    total_checks: int = 0
    successful_checks: int = 0
    failed_checks: int = 0
    uptime_percentage: float = 0.0
    average_response_time: int = 0
    current_status: str = "down"
    last_check_time: datetime | None = None
    incidents: list[Incident] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalChecks": self.total_checks,
            "successfulChecks": self.successful_checks,
            "failedChecks": self.failed_checks,
            "uptimePercentage": self.uptime_percentage,
            "averageResponseTime": self.average_response_time,
            "currentStatus": self.current_status,
            "lastCheckTime": _isoformat(self.last_check_time),
            "incidents": [incident.to_dict() for incident in self.incidents],
        }


def calculate_incidents(
    records: list[ProbeRecord], now: datetime | None = None
) -> list[Incident]:
    """
    Split failing runs into incidents.

    Args:
        records: probe records, most recent first
        now: wall-clock time used to size a still-open incident

    Returns:
        Incidents, most recent first
    """
    incidents: list[Incident] = []
    current: Incident | None = None

    for record in reversed(records):
        if not record.up:
            # The first failure of a run names the incident
            if current is None:
                current = Incident(
                    start_time=record.timestamp,
                    end_time=None,
                    duration_minutes=0,
                    error_message=record.error_message or UNKNOWN_ERROR,
                )
        elif current is not None:
            current.end_time = record.timestamp
            current.duration_minutes = _minutes_between(current.start_time, record.timestamp)
            incidents.append(current)
            current = None

    if current is not None:
        # Still down: measure against now, not the end of the window
        now = now or timezone.now()
        current.duration_minutes = _minutes_between(current.start_time, now)
        incidents.append(current)

    incidents.reverse()
    return incidents


def compute_stats(
    records: Iterable[ProbeRecord], now: datetime | None = None
) -> Stats:
    """
    Compute statistics over the given records.

    An empty window is not an error: it reports zero checks and a
    "down" current status.
    """
    # Store order is kept for equal timestamps
    ordered = sorted(records, key=lambda r: r.timestamp, reverse=True)

    if not ordered:
        logger.debug("No probe records in window")
        return Stats()

    total = len(ordered)
    successful = sum(1 for r in ordered if r.up)
    total_response_time = sum(r.response_time_ms for r in ordered)
    head = ordered[0]

    return Stats(
        total_checks=total,
        successful_checks=successful,
        failed_checks=total - successful,
        uptime_percentage=round_half_up(successful / total * 100, 2),
        average_response_time=int(round_half_up(total_response_time / total)),
        current_status=head.status,
        last_check_time=head.timestamp,
        incidents=calculate_incidents(ordered, now=now),
    )
