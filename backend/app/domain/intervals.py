"""
Interval arithmetic for calendar commitments.

A commitment (booking, calendar block or last-minute block) occupies the
half-open range ``[start, start + duration + buffer)``. Two ranges
conflict when ``a.start < b.end and a.end > b.start``; back-to-back
ranges with zero gap do not.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .duration_grid import MAX_BUFFER_MINUTES, MAX_DURATION_MINUTES

# Longest range a single commitment can cover.
MAX_COMMITMENT_MINUTES = MAX_DURATION_MINUTES + MAX_BUFFER_MINUTES


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeInterval bounds must be timezone-aware")
        if self.end <= self.start:
            raise ValueError("TimeInterval end must be after start")

    @classmethod
    def from_minutes(cls, start: datetime, *minutes: int) -> "TimeInterval":
        return cls(start, start + timedelta(minutes=sum(minutes)))

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True)
class Commitment:
    """An occupied range on a professional's calendar."""

    kind: str  # booking | calendar_block | last_minute_block
    id: str
    interval: TimeInterval
    label: Optional[str] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.id,
            "start": self.interval.start.isoformat(),
            "end": self.interval.end.isoformat(),
            "label": self.label,
        }


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and a.end > b.start


def has_conflict(candidate: TimeInterval, existing: Iterable[TimeInterval]) -> bool:
    return any(overlaps(candidate, other) for other in existing)


def find_conflicts(
    candidate: TimeInterval,
    existing: Iterable[Commitment],
    *,
    exclude_ids: Sequence[str] = (),
) -> List[Commitment]:
    """Return every commitment that collides with ``candidate``, in start order."""
    hits = [
        commitment
        for commitment in existing
        if commitment.id not in exclude_ids and overlaps(candidate, commitment.interval)
    ]
    return sorted(hits, key=lambda c: c.interval.start)


def neighborhood_window(
    start: datetime, duration_minutes: int, buffer_minutes: int
) -> TimeInterval:
    """
    Range of commitment start times worth loading for a conflict check.

    Covers at least two candidate lengths either side of ``start``. The lower
    bound reaches back far enough to include the longest possible commitment
    that could still be running at ``start``.
    """
    span = max(1, duration_minutes + buffer_minutes)
    before = max(2 * span, MAX_COMMITMENT_MINUTES)
    after = 2 * span
    return TimeInterval(start - timedelta(minutes=before), start + timedelta(minutes=after))
