"""
Timezone utilities for the salon scheduling platform.

Business rules (working hours, same-day discounts) are evaluated in the
professional's IANA zone while every stored instant is UTC. The helpers
here are the only place that converts between the two.

DST policy:
- a wall time that does not exist (spring-forward gap) resolves forward
  by the size of the gap, so 02:30 on a 1h gap becomes 03:30 local;
- an ambiguous wall time (fall-back overlap) resolves to the first
  occurrence, i.e. the daylight-saving offset.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pytz

from .exceptions import InvalidTimeZoneException

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


@dataclass(frozen=True)
class CivilTime:
    """Wall-clock reading in a named zone, with no offset attached."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    @classmethod
    def from_datetime(cls, value: datetime) -> "CivilTime":
        return cls(value.year, value.month, value.day, value.hour, value.minute, value.second)

    @classmethod
    def combine(cls, day: date, at: time) -> "CivilTime":
        return cls(day.year, day.month, day.day, at.hour, at.minute, at.second)

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    @property
    def weekday_key(self) -> str:
        return WEEKDAY_KEYS[self.date.weekday()]

    def to_naive(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)


def validate(time_zone: Optional[str]) -> bool:
    """Return True when ``time_zone`` names a zone in the IANA database."""
    if not time_zone or not isinstance(time_zone, str):
        return False
    return time_zone.strip() in pytz.all_timezones_set


def sanitize(time_zone: Optional[str], fallback: str) -> str:
    """
    Return ``time_zone`` when valid, otherwise ``fallback``.

    Only the API boundary should call this; core code must fail loudly on
    an unknown zone instead of silently switching to a default.
    """
    if validate(time_zone):
        return time_zone.strip()  # type: ignore[union-attr]
    return fallback


def get_zone(time_zone: Optional[str]) -> pytz.BaseTzInfo:
    """Resolve a zone or raise InvalidTimeZoneException."""
    if not validate(time_zone):
        raise InvalidTimeZoneException(time_zone)
    return pytz.timezone(time_zone.strip())  # type: ignore[union-attr]


def ensure_utc(instant: datetime) -> datetime:
    """Normalize an instant to aware UTC; naive values are assumed to be UTC."""
    if instant.tzinfo is None:
        return pytz.UTC.localize(instant)
    return instant.astimezone(pytz.UTC)


def civil_to_utc(civil: Union[CivilTime, datetime], time_zone: str) -> datetime:
    """
    Interpret a wall-clock reading in ``time_zone`` and return the UTC instant.

    Args:
        civil: CivilTime or naive datetime (any tzinfo on a datetime is ignored)
        time_zone: IANA identifier

    Raises:
        InvalidTimeZoneException: if the zone cannot be resolved
    """
    zone = get_zone(time_zone)
    naive = civil.to_naive() if isinstance(civil, CivilTime) else civil.replace(tzinfo=None)

    try:
        local = zone.localize(naive, is_dst=None)
    except pytz.exceptions.AmbiguousTimeError:
        local = zone.localize(naive, is_dst=True)
    except pytz.exceptions.NonExistentTimeError:
        # Pre-transition offset pushes the reading past the gap once normalized.
        local = zone.normalize(zone.localize(naive, is_dst=False))

    return local.astimezone(pytz.UTC)


def to_local(instant: datetime, time_zone: str) -> datetime:
    """Return the aware local datetime for a UTC instant."""
    zone = get_zone(time_zone)
    return ensure_utc(instant).astimezone(zone)


def utc_to_civil(instant: datetime, time_zone: str) -> CivilTime:
    return CivilTime.from_datetime(to_local(instant, time_zone))


def weekday_key(instant: datetime, time_zone: str) -> str:
    """Return the ``mon``..``sun`` key for the local date of ``instant``."""
    return utc_to_civil(instant, time_zone).weekday_key


def local_day_bounds(day: date, time_zone: str) -> tuple[datetime, datetime]:
    """UTC instants for local midnight of ``day`` and of the following day."""
    start = civil_to_utc(CivilTime.combine(day, time.min), time_zone)
    end = civil_to_utc(CivilTime.combine(day + timedelta(days=1), time.min), time_zone)
    return start, end
