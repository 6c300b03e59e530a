# backend/tests/unit/services/test_availability_service.py
"""
AvailabilityService.day_slots: the client-facing day view.

``now`` is Monday 2025-03-03 14:00 in Los Angeles; the professional keeps
the default Monday-Friday 09:00-17:00 hours.
"""

from datetime import date

import pytest

from app.core.exceptions import (
    MisconfiguredHoursException,
    NotFoundException,
    ServiceNotOfferedException,
    ValidationException,
)
from app.services.availability_service import AvailabilityService
from app.services.calendar_block_service import CalendarBlockService
from app.services.last_minute_service import LastMinuteService
from tests._utils import LOS_ANGELES, la_time, seed_booking

NOW = la_time(3, 14)
MONDAY = date(2025, 3, 3)
TUESDAY = date(2025, 3, 4)


@pytest.fixture
def availability(unit_db) -> AvailabilityService:
    return AvailabilityService(unit_db)


def _half_hours(day: int, first: tuple, last: tuple):
    slots = []
    hour, minute = first
    while (hour, minute) <= last:
        slots.append(la_time(day, hour, minute))
        hour, minute = (hour, 30) if minute == 0 else (hour + 1, 0)
    return slots


class TestDaySlots:
    def test_full_free_day(self, availability, professional, haircut):
        result = availability.day_slots(professional.id, haircut.id, TUESDAY, now=NOW)

        assert result.time_zone == LOS_ANGELES
        assert result.location_type == "SALON"
        assert (result.duration_minutes, result.step_minutes, result.lead_minutes) == (45, 30, 10)
        # The last 45 minute start that still ends by 17:00 on the half hour grid is 16:00.
        assert result.slots == _half_hours(4, (9, 0), (16, 0))

    def test_today_respects_lead_time(self, availability, professional, haircut):
        result = availability.day_slots(professional.id, haircut.id, MONDAY, now=NOW)
        assert result.slots == _half_hours(3, (14, 30), (16, 0))

    def test_longer_lead_time(self, availability, professional, haircut):
        result = availability.day_slots(
            professional.id, haircut.id, MONDAY, now=NOW, lead_minutes=120
        )
        assert result.slots == [la_time(3, 16)]

    def test_lead_time_is_capped(self, availability, professional, haircut):
        result = availability.day_slots(
            professional.id, haircut.id, MONDAY, now=NOW, lead_minutes=1000
        )
        assert result.lead_minutes == 240
        assert result.slots == []

    @pytest.mark.parametrize("requested, used", [(15, 15), (1, 5), (500, 60)])
    def test_step_is_clamped(self, availability, professional, haircut, requested, used):
        result = availability.day_slots(
            professional.id, haircut.id, TUESDAY, now=NOW, step_minutes=requested
        )
        assert result.step_minutes == used
        assert result.slots[0] == la_time(4, 9)

    def test_fifteen_minute_step(self, availability, professional, haircut):
        result = availability.day_slots(
            professional.id, haircut.id, TUESDAY, now=NOW, step_minutes=15
        )
        assert len(result.slots) == 30
        assert result.slots[-1] == la_time(4, 16, 15)


class TestBusyTime:
    def test_booking_and_its_buffer_are_busy(
        self, unit_db, availability, professional, client_profile, haircut
    ):
        seed_booking(
            unit_db, professional.id, client_profile.id, la_time(4, 10), 60, buffer_minutes=15
        )
        result = availability.day_slots(professional.id, haircut.id, TUESDAY, now=NOW)

        # Busy 10:00-11:15: 09:30 would end inside it, 11:00 starts inside it.
        assert result.slots[:2] == [la_time(4, 9), la_time(4, 11, 30)]

    def test_cancelled_booking_is_free(
        self, unit_db, availability, professional, client_profile, haircut
    ):
        booking = seed_booking(unit_db, professional.id, client_profile.id, la_time(4, 10), 60)
        booking.cancel("client asked")
        unit_db.commit()

        result = availability.day_slots(professional.id, haircut.id, TUESDAY, now=NOW)
        assert la_time(4, 10) in result.slots

    def test_calendar_block_is_busy(self, unit_db, availability, professional, haircut):
        CalendarBlockService(unit_db).create_block(professional.id, la_time(4, 12), la_time(4, 13))
        result = availability.day_slots(professional.id, haircut.id, TUESDAY, now=NOW)

        for busy in (la_time(4, 11, 30), la_time(4, 12), la_time(4, 12, 30)):
            assert busy not in result.slots
        assert la_time(4, 11) in result.slots
        assert la_time(4, 13) in result.slots

    def test_last_minute_blackout_is_busy(self, unit_db, availability, professional, haircut):
        LastMinuteService(unit_db).add_block(professional.id, la_time(4, 15), la_time(4, 16))
        result = availability.day_slots(professional.id, haircut.id, TUESDAY, now=NOW)
        assert la_time(4, 15) not in result.slots
        assert la_time(4, 16) in result.slots


class TestLocation:
    def test_mobile_uses_mobile_length(self, availability, professional, color):
        result = availability.day_slots(
            professional.id, color.id, TUESDAY, location_type="MOBILE", now=NOW
        )
        assert result.location_type == "MOBILE"
        assert result.duration_minutes == 75
        assert result.slots[-1] == la_time(4, 15, 30)

    def test_location_not_offered(self, availability, professional, haircut):
        with pytest.raises(ServiceNotOfferedException):
            availability.day_slots(
                professional.id, haircut.id, TUESDAY, location_type="MOBILE", now=NOW
            )

    def test_unknown_service(self, availability, professional):
        with pytest.raises(ServiceNotOfferedException):
            availability.day_slots(professional.id, "NOPE", TUESDAY, now=NOW)

    def test_unknown_professional(self, availability, haircut):
        with pytest.raises(NotFoundException):
            availability.day_slots("NOPE", haircut.id, TUESDAY, now=NOW)


class TestCalendarLimits:
    def test_closed_day_is_empty(self, availability, professional, haircut):
        result = availability.day_slots(professional.id, haircut.id, date(2025, 3, 9), now=NOW)
        assert result.slots == []

    def test_misconfigured_day(self, unit_db, availability, professional, haircut):
        professional.working_hours = {"tue": {"enabled": True, "start": "12:00", "end": "11:00"}}
        unit_db.commit()
        with pytest.raises(MisconfiguredHoursException):
            availability.day_slots(professional.id, haircut.id, TUESDAY, now=NOW)

    def test_past_day_is_rejected(self, availability, professional, haircut):
        with pytest.raises(ValidationException):
            availability.day_slots(professional.id, haircut.id, date(2025, 3, 2), now=NOW)

    def test_booking_horizon(self, availability, professional, haircut):
        last_day = date(2026, 3, 3)
        assert availability.day_slots(professional.id, haircut.id, last_day, now=NOW).slots
        with pytest.raises(ValidationException):
            availability.day_slots(professional.id, haircut.id, date(2026, 3, 4), now=NOW)

    def test_spring_forward_day_has_no_duplicate_starts(
        self, unit_db, availability, professional, color
    ):
        professional.working_hours = {"sun": {"enabled": True, "start": "00:00", "end": "06:00"}}
        unit_db.commit()

        result = availability.day_slots(
            professional.id, color.id, date(2025, 3, 9), now=la_time(8, 12)
        )

        # 02:00 and 02:30 do not exist and land on 03:00 and 03:30.
        assert len(result.slots) == len(set(result.slots)) == 9
        assert result.slots == sorted(result.slots)
