"""
Unit tests for the weekly working-hours policy.

All instants are UTC; the checks read them in the professional's zone.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.intervals import TimeInterval
from app.domain.working_hours import (
    DEFAULT_WORKING_HOURS,
    WorkingHoursViolation,
    format_hhmm,
    is_within_working_hours,
    normalize_policy,
    parse_hhmm,
    working_window,
)
from tests._utils import LOS_ANGELES, la_time


def _la_interval(day: int, hour: int, minute: int, minutes: int) -> TimeInterval:
    return TimeInterval.from_minutes(la_time(day, hour, minute), minutes)


class TestParsing:
    @pytest.mark.parametrize(
        "value,expected",
        [("09:00", 540), ("9:05", 545), ("23:59", 1439), ("00:00", 0)],
    )
    def test_parse_hhmm(self, value, expected):
        assert parse_hhmm(value) == expected

    @pytest.mark.parametrize("value", ["24:00", "12:60", "9am", "", None, 900])
    def test_parse_hhmm_rejects_garbage(self, value):
        assert parse_hhmm(value) is None

    def test_format_hhmm_pads(self):
        assert format_hhmm(545) == "09:05"


class TestWorkingWindow:
    def test_enabled_day(self):
        assert working_window(DEFAULT_WORKING_HOURS, "mon") == ((540, 1020), None)

    def test_disabled_or_missing_day_is_outside(self):
        assert working_window(DEFAULT_WORKING_HOURS, "sun") == (
            None,
            WorkingHoursViolation.OUTSIDE_WORKING_HOURS,
        )
        assert working_window({}, "mon")[1] is WorkingHoursViolation.OUTSIDE_WORKING_HOURS
        assert working_window(None, "mon")[1] is WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    def test_inverted_window_is_misconfigured(self):
        policy = {"mon": {"enabled": True, "start": "17:00", "end": "09:00"}}
        assert working_window(policy, "mon") == (None, WorkingHoursViolation.MISCONFIGURED_HOURS)

    def test_unparsable_window_is_misconfigured(self):
        policy = {"mon": {"enabled": True, "start": "nine", "end": "17:00"}}
        assert working_window(policy, "mon")[1] is WorkingHoursViolation.MISCONFIGURED_HOURS


class TestIsWithinWorkingHours:
    def test_interval_inside_window(self):
        check = is_within_working_hours(
            _la_interval(3, 9, 0, 60), DEFAULT_WORKING_HOURS, LOS_ANGELES
        )
        assert check.ok
        assert check.weekday == "mon"

    def test_full_day_fits_exactly(self):
        check = is_within_working_hours(
            _la_interval(3, 9, 0, 480), DEFAULT_WORKING_HOURS, LOS_ANGELES
        )
        assert check.ok

    def test_one_minute_past_closing_is_outside(self):
        check = is_within_working_hours(
            _la_interval(3, 9, 0, 481), DEFAULT_WORKING_HOURS, LOS_ANGELES
        )
        assert not check.ok
        assert check.reason is WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    def test_running_past_closing_is_outside(self):
        check = is_within_working_hours(
            _la_interval(3, 16, 30, 60), DEFAULT_WORKING_HOURS, LOS_ANGELES
        )
        assert not check.ok
        assert check.reason is WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    def test_before_opening_is_outside(self):
        check = is_within_working_hours(
            _la_interval(3, 8, 0, 30), DEFAULT_WORKING_HOURS, LOS_ANGELES
        )
        assert check.reason is WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    def test_disabled_day_is_outside(self):
        # 2025-03-09 is a Sunday
        check = is_within_working_hours(
            _la_interval(9, 10, 0, 60), DEFAULT_WORKING_HOURS, LOS_ANGELES
        )
        assert check.weekday == "sun"
        assert check.reason is WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    def test_crossing_local_midnight_is_outside(self):
        policy = {"tue": {"enabled": True, "start": "20:00", "end": "23:45"}}
        check = is_within_working_hours(_la_interval(4, 23, 0, 90), policy, LOS_ANGELES)
        assert check.reason is WorkingHoursViolation.OUTSIDE_WORKING_HOURS

    def test_misconfigured_day_is_reported(self):
        policy = {"mon": {"enabled": True, "start": "17:00", "end": "09:00"}}
        check = is_within_working_hours(_la_interval(3, 10, 0, 60), policy, LOS_ANGELES)
        assert check.reason is WorkingHoursViolation.MISCONFIGURED_HOURS

    def test_evaluated_in_the_professionals_zone(self):
        # 16:00 UTC is 08:00 in Los Angeles but 11:00 in New York.
        interval = TimeInterval.from_minutes(
            datetime(2025, 3, 3, 16, 0, tzinfo=timezone.utc), 60
        )
        assert not is_within_working_hours(interval, DEFAULT_WORKING_HOURS, LOS_ANGELES).ok
        assert is_within_working_hours(interval, DEFAULT_WORKING_HOURS, "America/New_York").ok

    def test_spring_forward_day_uses_the_new_offset(self):
        # Monday after the March 9 change: 09:00 PDT is 16:00 UTC.
        start = datetime(2025, 3, 10, 16, 0, tzinfo=timezone.utc)
        interval = TimeInterval(start, start + timedelta(hours=1))
        assert is_within_working_hours(interval, DEFAULT_WORKING_HOURS, LOS_ANGELES).ok


class TestNormalizePolicy:
    def test_missing_days_fall_back_to_defaults(self):
        policy = normalize_policy({"sat": {"enabled": True, "start": "10:00", "end": "14:00"}})
        assert policy["sat"] == {"enabled": True, "start": "10:00", "end": "14:00"}
        assert policy["mon"] == DEFAULT_WORKING_HOURS["mon"]
        assert list(policy) == ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

    def test_times_are_canonicalized(self):
        policy = normalize_policy({"mon": {"enabled": True, "start": "9:00", "end": "17:30"}})
        assert policy["mon"]["start"] == "09:00"

    def test_disabled_day_may_keep_an_inverted_window(self):
        policy = normalize_policy({"sun": {"enabled": False, "start": "18:00", "end": "08:00"}})
        assert policy["sun"]["enabled"] is False

    def test_unknown_day_is_rejected(self):
        with pytest.raises(ValueError, match="Unknown weekday"):
            normalize_policy({"funday": {"enabled": True}})

    def test_enabled_inverted_window_is_rejected(self):
        with pytest.raises(ValueError, match="end must be after start"):
            normalize_policy({"mon": {"enabled": True, "start": "17:00", "end": "09:00"}})

    def test_unparsable_time_is_rejected(self):
        with pytest.raises(ValueError, match="HH:MM"):
            normalize_policy({"mon": {"enabled": True, "start": "noon", "end": "17:00"}})
