"""Thread-safe aggregate statistics over ingested message metadata."""

from __future__ import annotations

import heapq
import threading
from dataclasses import dataclass, field

from .constants import DATE_KEY_FORMAT
from .models import EmailMetadata, SenderSummary


@dataclass
class StatsSnapshot:
    """Plain copy of the counters at one point in time."""

    from_count: dict[str, int] = field(default_factory=dict)
    to_count: dict[str, int] = field(default_factory=dict)
    from_size: dict[str, int] = field(default_factory=dict)
    date_count: dict[str, int] = field(default_factory=dict)
    total_emails: int = 0

    def to_dict(self) -> dict:
        return {
            "fromCount": dict(self.from_count),
            "toCount": dict(self.to_count),
            "fromSize": dict(self.from_size),
            "dateCount": dict(self.date_count),
            "totalEmails": self.total_emails,
        }

    def busiest_day(self) -> tuple[str, int] | None:
        if not self.date_count:
            return None
        return max(self.date_count.items(), key=lambda item: item[1])


class AggregateStatistics:
    """Accumulates sender, recipient, size and per-day counts.

    Counters only ever grow. Every mutation for one record happens inside a
    single critical section, so concurrent record() calls never lose updates.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._from_count: dict[str, int] = {}
        self._to_count: dict[str, int] = {}
        self._from_size: dict[str, int] = {}
        self._date_count: dict[str, int] = {}
        self._total = 0

    def record(self, metadata: EmailMetadata) -> None:
        """Fold one message's metadata into the counters."""
        day = metadata.date.strftime(DATE_KEY_FORMAT) if metadata.date is not None else None

        with self._lock:
            sender = metadata.sender
            self._from_count[sender] = self._from_count.get(sender, 0) + 1
            self._from_size[sender] = self._from_size.get(sender, 0) + metadata.size_estimate
            for recipient in metadata.recipients:
                self._to_count[recipient] = self._to_count.get(recipient, 0) + 1
            if day is not None:
                self._date_count[day] = self._date_count.get(day, 0) + 1
            self._total += 1

    @property
    def total(self) -> int:
        with self._lock:
            return self._total

    def top_senders(self, n: int) -> list[SenderSummary]:
        """Return the n senders with the most messages, highest first.

        Order among senders with equal counts is not defined.
        """
        if n <= 0:
            return []
        with self._lock:
            top = heapq.nlargest(n, self._from_count.items(), key=lambda item: item[1])
            return [
                SenderSummary(email=email, count=count, total_bytes=self._from_size.get(email, 0))
                for email, count in top
            ]

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                from_count=dict(self._from_count),
                to_count=dict(self._to_count),
                from_size=dict(self._from_size),
                date_count=dict(self._date_count),
                total_emails=self._total,
            )
