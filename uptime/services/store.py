"""
Append-only storage for probe records.

``DatabaseStore`` is what the running service uses; ``InMemoryStore``
keeps records in a list and is handy for tests and embedding.
"""
import logging
from datetime import datetime
from typing import Protocol

from uptime.models import ProbeRecord

logger = logging.getLogger(__name__)


class Store(Protocol):
    """Ordered log of probe records."""

    def save(self, record: ProbeRecord) -> ProbeRecord: ...

    def most_recent(self, n: int) -> list[ProbeRecord]: ...

    def records_in_range(self, start: datetime, end: datetime) -> list[ProbeRecord]: ...


class DatabaseStore:
    """Store backed by the ``ProbeRecord`` table."""

    def save(self, record: ProbeRecord) -> ProbeRecord:
        if record.pk is not None:
            raise ValueError("Probe records are immutable once stored")
        record.save(force_insert=True)
        logger.debug(f"Stored probe record {record.pk}: {record}")
        return record

    def most_recent(self, n: int) -> list[ProbeRecord]:
        """Return up to ``n`` records, most recent first."""
        if n <= 0:
            return []
        return list(ProbeRecord.objects.order_by("-timestamp", "-id")[:n])

    def records_in_range(self, start: datetime, end: datetime) -> list[ProbeRecord]:
        """Return records with ``start <= timestamp <= end``, most recent first."""
        return list(
            ProbeRecord.objects
            .filter(timestamp__gte=start, timestamp__lte=end)
            .order_by("-timestamp", "-id")
        )


class InMemoryStore:
    """List-backed store; ties in timestamp keep insertion order."""

    def __init__(self):
        self._records: list[ProbeRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def save(self, record: ProbeRecord) -> ProbeRecord:
        if record.pk is not None or any(r is record for r in self._records):
            raise ValueError("Probe records are immutable once stored")
        self._records.append(record)
        return record

    def most_recent(self, n: int) -> list[ProbeRecord]:
        if n <= 0:
            return []
        return self._ordered()[:n]

    def records_in_range(self, start: datetime, end: datetime) -> list[ProbeRecord]:
        return [r for r in self._ordered() if start <= r.timestamp <= end]

    def _ordered(self) -> list[ProbeRecord]:
        # Stable sort on reversed insertion order: later inserts win ties
        return sorted(reversed(self._records), key=lambda r: r.timestamp, reverse=True)
