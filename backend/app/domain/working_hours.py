"""
Weekly working-hours policy.

The policy is a mapping of ``mon``..``sun`` to ``{"enabled", "start", "end"}``
with ``HH:MM`` wall-clock strings in the professional's zone. Windows never
wrap past midnight.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from typing import Any, Dict, Mapping, Optional, Tuple

from app.core.timezone_utils import WEEKDAY_KEYS, utc_to_civil

from .intervals import TimeInterval

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")

DEFAULT_WORKING_HOURS: Dict[str, Dict[str, Any]] = {
    "mon": {"enabled": True, "start": "09:00", "end": "17:00"},
    "tue": {"enabled": True, "start": "09:00", "end": "17:00"},
    "wed": {"enabled": True, "start": "09:00", "end": "17:00"},
    "thu": {"enabled": True, "start": "09:00", "end": "17:00"},
    "fri": {"enabled": True, "start": "09:00", "end": "17:00"},
    "sat": {"enabled": False, "start": "09:00", "end": "17:00"},
    "sun": {"enabled": False, "start": "09:00", "end": "17:00"},
}


class WorkingHoursViolation(str, Enum):
    OUTSIDE_WORKING_HOURS = "OUTSIDE_WORKING_HOURS"
    MISCONFIGURED_HOURS = "MISCONFIGURED_HOURS"


@dataclass(frozen=True)
class WorkingHoursCheck:
    ok: bool
    weekday: str
    reason: Optional[WorkingHoursViolation] = None


def parse_hhmm(value: Any) -> Optional[int]:
    """Return minutes since midnight for ``HH:MM``, or None when unparsable."""
    if not isinstance(value, str):
        return None
    match = _HHMM.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def working_window(
    policy: Optional[Mapping[str, Any]], weekday: str
) -> Tuple[Optional[Tuple[int, int]], Optional[WorkingHoursViolation]]:
    """
    Resolve the ``(start, end)`` minute window for one weekday.

    Returns ``(None, reason)`` when the day is closed or its rule is broken.
    """
    rule = (policy or {}).get(weekday)
    if not isinstance(rule, Mapping) or not rule.get("enabled"):
        return None, WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    start = parse_hhmm(rule.get("start"))
    end = parse_hhmm(rule.get("end"))
    if start is None or end is None or end <= start:
        return None, WorkingHoursViolation.MISCONFIGURED_HOURS
    return (start, end), None


def is_within_working_hours(
    interval: TimeInterval, policy: Optional[Mapping[str, Any]], time_zone: str
) -> WorkingHoursCheck:
    local_start = utc_to_civil(interval.start, time_zone)
    local_end = utc_to_civil(interval.end, time_zone)
    weekday = local_start.weekday_key

    window, reason = working_window(policy, weekday)
    if window is None:
        return WorkingHoursCheck(ok=False, weekday=weekday, reason=reason)

    # Appointments that run past local midnight are never inside a window.
    if local_end.date != local_start.date:
        return WorkingHoursCheck(
            ok=False, weekday=weekday, reason=WorkingHoursViolation.OUTSIDE_WORKING_HOURS
        )

    window_start, window_end = window
    start_minutes = local_start.minutes_since_midnight
    end_minutes = local_end.minutes_since_midnight
    if window_start <= start_minutes and end_minutes <= window_end:
        return WorkingHoursCheck(ok=True, weekday=weekday)
    return WorkingHoursCheck(
        ok=False, weekday=weekday, reason=WorkingHoursViolation.OUTSIDE_WORKING_HOURS
    )


def normalize_policy(raw: Optional[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Validate and canonicalize a full weekly policy.

    Missing days fall back to the default rule for that day; enabled days
    must have a parsable window with ``end > start``.

    Raises:
        ValueError: when an enabled day has an invalid window
    """
    raw = raw or {}
    unknown = set(raw) - set(WEEKDAY_KEYS)
    if unknown:
        raise ValueError(f"Unknown weekday keys: {', '.join(sorted(unknown))}")

    normalized: Dict[str, Dict[str, Any]] = {}
    for day in WEEKDAY_KEYS:
        rule = raw.get(day)
        if rule is None:
            normalized[day] = dict(DEFAULT_WORKING_HOURS[day])
            continue
        if not isinstance(rule, Mapping):
            raise ValueError(f"{day}: rule must be an object")

        enabled = bool(rule.get("enabled"))
        start = parse_hhmm(rule.get("start", DEFAULT_WORKING_HOURS[day]["start"]))
        end = parse_hhmm(rule.get("end", DEFAULT_WORKING_HOURS[day]["end"]))
        if start is None or end is None:
            raise ValueError(f"{day}: start and end must be HH:MM")
        if enabled and end <= start:
            raise ValueError(f"{day}: end must be after start")
        normalized[day] = {"enabled": enabled, "start": format_hhmm(start), "end": format_hhmm(end)}
    return normalized
