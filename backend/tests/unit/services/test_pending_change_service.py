"""
Propose / confirm / cancel for dragged and resized calendar items.

A proposal never writes; confirm re-validates everything from scratch.
"""

import pytest

from app.core.exceptions import (
    InvalidStatusTransitionException,
    MisconfiguredHoursException,
    NotFoundException,
    OutsideWorkingHoursException,
    TimeSlotUnavailableException,
)
from app.models.booking import Booking
from app.models.calendar_block import CalendarBlock
from app.schemas.calendar import PendingChangeRequest
from app.services.booking_service import BookingService
from app.services.calendar_block_service import CalendarBlockService
from app.services.pending_change_service import PendingChangeService
from tests._utils import la_time, seed_booking


@pytest.fixture
def workflow(unit_db) -> PendingChangeService:
    return PendingChangeService(unit_db)


@pytest.fixture
def booked(unit_db, professional, client_profile) -> Booking:
    return seed_booking(unit_db, professional.id, client_profile.id, la_time(3, 10), 60)


@pytest.fixture
def block(unit_db, professional) -> CalendarBlock:
    return CalendarBlockService(unit_db).create_block(
        professional.id, la_time(3, 13), la_time(3, 14), note="Lunch"
    )


def _move(entity_id, start, minutes=None, entity_type="booking") -> PendingChangeRequest:
    return PendingChangeRequest(
        entity_type=entity_type,
        entity_id=entity_id,
        kind="move",
        next_start=start,
        next_duration_minutes=minutes,
    )


def _resize(entity_id, minutes, entity_type="booking") -> PendingChangeRequest:
    return PendingChangeRequest(
        entity_type=entity_type, entity_id=entity_id, kind="resize", next_duration_minutes=minutes
    )


class TestOutsideHoursConfirmation:
    """Monday 08:00-08:30 is before opening."""

    def test_booking_service_rejects_without_override(
        self, unit_db, professional, booked
    ):
        with pytest.raises(OutsideWorkingHoursException):
            BookingService(unit_db).reschedule_booking(
                professional.id, booked.id, la_time(3, 8), 30
            )

    def test_proposal_asks_for_confirmation(self, unit_db, workflow, professional, booked):
        proposal = workflow.propose(professional.id, _move(booked.id, la_time(3, 8), 30))

        assert proposal.ok
        assert proposal.outside_working_hours
        assert proposal.requires_confirmation
        assert proposal.interval.start == la_time(3, 8)
        assert proposal.interval.end == la_time(3, 8, 30)

        unit_db.refresh(booked)
        assert booked.scheduled_for == la_time(3, 10)

    def test_confirm_with_override_commits(self, workflow, professional, booked):
        change = _move(booked.id, la_time(3, 8), 30)
        moved = workflow.confirm(professional.id, change, allow_outside_hours=True)

        assert moved.scheduled_for == la_time(3, 8)
        assert moved.total_duration_minutes == 30

    def test_confirm_without_override_is_rejected(self, workflow, professional, booked):
        with pytest.raises(OutsideWorkingHoursException):
            workflow.confirm(professional.id, _move(booked.id, la_time(3, 8), 30))


class TestBookingProposals:
    def test_clean_move(self, workflow, professional, booked):
        proposal = workflow.propose(professional.id, _move(booked.id, la_time(3, 14)))
        assert proposal.ok
        assert not proposal.requires_confirmation
        assert proposal.interval.minutes == 60

    def test_overlap_with_itself_is_not_a_conflict(self, workflow, professional, booked):
        proposal = workflow.propose(professional.id, _move(booked.id, la_time(3, 10, 30)))
        assert proposal.ok
        assert proposal.conflicts == []

    def test_conflict_is_reported_not_raised(
        self, unit_db, workflow, professional, client_profile, booked
    ):
        other = seed_booking(unit_db, professional.id, client_profile.id, la_time(3, 12), 60)
        proposal = workflow.propose(professional.id, _move(booked.id, la_time(3, 11, 30)))

        assert not proposal.ok
        assert not proposal.requires_confirmation
        assert [c.id for c in proposal.conflicts] == [other.id]

    def test_conflict_outside_hours_cannot_be_confirmed(
        self, unit_db, workflow, professional, client_profile, booked
    ):
        seed_booking(unit_db, professional.id, client_profile.id, la_time(3, 7, 30), 60)
        change = _move(booked.id, la_time(3, 8), 30)

        proposal = workflow.propose(professional.id, change)
        assert not proposal.ok
        assert proposal.outside_working_hours
        assert not proposal.requires_confirmation
        with pytest.raises(TimeSlotUnavailableException):
            workflow.confirm(professional.id, change, allow_outside_hours=True)

    def test_resize_keeps_start_and_buffer(self, unit_db, workflow, professional, booked):
        booked.buffer_minutes = 15
        unit_db.commit()

        proposal = workflow.propose(professional.id, _resize(booked.id, 95))
        assert proposal.interval.start == la_time(3, 10)
        # 95 snaps to 90, plus the 15 minute buffer
        assert proposal.interval.minutes == 105

    def test_resize_confirm(self, workflow, professional, booked):
        resized = workflow.confirm(professional.id, _resize(booked.id, 120))
        assert resized.total_duration_minutes == 120
        assert resized.scheduled_for == la_time(3, 10)

    def test_resize_past_closing_needs_confirmation(self, workflow, professional, booked):
        proposal = workflow.propose(professional.id, _resize(booked.id, 480))
        assert proposal.requires_confirmation

    def test_misconfigured_day_raises(self, unit_db, workflow, professional, booked):
        professional.working_hours = {"tue": {"enabled": True, "start": "12:00", "end": "11:00"}}
        unit_db.commit()
        with pytest.raises(MisconfiguredHoursException):
            workflow.propose(professional.id, _move(booked.id, la_time(4, 10)))

    def test_completed_booking_cannot_be_proposed(self, unit_db, workflow, professional, booked):
        booked.complete()
        unit_db.commit()
        with pytest.raises(InvalidStatusTransitionException):
            workflow.propose(professional.id, _move(booked.id, la_time(3, 14)))

    def test_unknown_booking(self, workflow, professional):
        with pytest.raises(NotFoundException):
            workflow.propose(professional.id, _move("NOPE", la_time(3, 14)))

    def test_other_professionals_booking_is_not_found(
        self, unit_db, workflow, booked
    ):
        with pytest.raises(NotFoundException):
            workflow.propose("SOMEONE_ELSE", _move(booked.id, la_time(3, 14)))


class TestBlockProposals:
    def test_blocks_ignore_working_hours(self, workflow, professional, block):
        proposal = workflow.propose(
            professional.id, _move(block.id, la_time(3, 20), entity_type="block")
        )
        assert proposal.ok
        assert not proposal.outside_working_hours
        assert proposal.interval.minutes == 60

    def test_block_move_into_booking_conflicts(self, workflow, professional, block, booked):
        proposal = workflow.propose(
            professional.id, _move(block.id, la_time(3, 10, 30), entity_type="block")
        )
        assert not proposal.ok
        assert proposal.conflicts[0].id == booked.id

    def test_block_resize_confirm(self, workflow, professional, block):
        resized = workflow.confirm(professional.id, _resize(block.id, 90, entity_type="block"))
        assert resized.start_at == la_time(3, 13)
        assert resized.end_at == la_time(3, 14, 30)

    def test_block_move_confirm(self, workflow, professional, block):
        moved = workflow.confirm(
            professional.id, _move(block.id, la_time(3, 15), entity_type="block")
        )
        assert moved.start_at == la_time(3, 15)
        assert moved.end_at == la_time(3, 16)

    def test_booking_cannot_be_moved_onto_a_block(self, workflow, professional, block, booked):
        with pytest.raises(TimeSlotUnavailableException):
            workflow.confirm(professional.id, _move(booked.id, la_time(3, 13, 30)))


def test_cancel_leaves_everything_untouched(unit_db, workflow, professional, booked):
    change = _move(booked.id, la_time(3, 14))
    workflow.propose(professional.id, change)
    assert workflow.cancel(professional.id, change) is True

    unit_db.refresh(booked)
    assert booked.scheduled_for == la_time(3, 10)


def test_move_requires_a_start():
    with pytest.raises(ValueError):
        PendingChangeRequest(entity_type="booking", entity_id="b1", kind="move")


def test_resize_requires_a_duration():
    with pytest.raises(ValueError):
        PendingChangeRequest(entity_type="block", entity_id="b1", kind="resize")
