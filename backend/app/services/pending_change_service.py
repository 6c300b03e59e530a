# backend/app/services/pending_change_service.py
"""
Propose / confirm protocol for interactive calendar edits.

Dragging a booking or block produces a proposal that is validated but
never written. The caller shows the result and, if the operator accepts
it, sends the same change back to ``confirm`` which re-validates and
commits. Nothing is held on the server between the two calls.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..core.exceptions import InvalidStatusTransitionException, MisconfiguredHoursException
from ..core.timezone_utils import ensure_utc
from ..domain.duration_grid import resolve_total_duration
from ..domain.intervals import Commitment, TimeInterval
from ..models.booking import Booking
from ..models.calendar_block import CalendarBlock
from ..schemas.calendar import PendingChangeRequest
from .base import BaseService
from .booking_service import BookingService
from .calendar_block_service import CalendarBlockService

logger = logging.getLogger(__name__)


@dataclass
class ChangeProposal:
    """Validation outcome for a proposed change; never persisted."""

    interval: TimeInterval
    outside_working_hours: bool = False
    conflicts: List[Commitment] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.conflicts

    @property
    def requires_confirmation(self) -> bool:
        return self.ok and self.outside_working_hours


class PendingChangeService(BaseService):
    def __init__(
        self,
        db: Session,
        booking_service: Optional[BookingService] = None,
        block_service: Optional[CalendarBlockService] = None,
    ):
        super().__init__(db)
        self.booking_service = booking_service or BookingService(db)
        self.block_service = block_service or CalendarBlockService(
            db, conflict_checker=self.booking_service.conflict_checker
        )

    def _booking_candidate(self, booking: Booking, change: PendingChangeRequest) -> TimeInterval:
        if change.kind == "move":
            start = ensure_utc(change.next_start) if change.next_start else booking.scheduled_for
            minutes = resolve_total_duration(
                change.next_duration_minutes, booking.total_duration_minutes
            )
        else:
            start = booking.scheduled_for
            minutes = resolve_total_duration(
                change.next_duration_minutes, change.next_duration_minutes
            )
        return TimeInterval.from_minutes(start, minutes, booking.buffer_minutes)

    def _propose_booking(
        self, professional_id: str, change: PendingChangeRequest
    ) -> ChangeProposal:
        booking = self.booking_service.get_booking(professional_id, change.entity_id)
        if booking.is_terminal:
            raise InvalidStatusTransitionException(booking.status, "RESCHEDULED")

        professional = self.booking_service.get_professional(professional_id)
        candidate = self._booking_candidate(booking, change)
        assessment = self.booking_service.assess_interval(
            professional,
            candidate,
            duration_minutes=candidate.minutes - booking.buffer_minutes,
            buffer_minutes=booking.buffer_minutes,
            exclude_ids=[booking.id],
        )
        if assessment.misconfigured_hours:
            weekday = assessment.working_hours.weekday if assessment.working_hours else None
            raise MisconfiguredHoursException(weekday)
        return ChangeProposal(
            interval=candidate,
            outside_working_hours=assessment.outside_working_hours,
            conflicts=assessment.conflicts,
        )

    def _propose_block(
        self, professional_id: str, change: PendingChangeRequest
    ) -> ChangeProposal:
        block = self.block_service.get_block(professional_id, change.entity_id)
        if change.kind == "move":
            candidate = self.block_service.candidate_for(
                block, change.next_start, change.next_duration_minutes
            )
        else:
            candidate = self.block_service.candidate_for(block, None, change.next_duration_minutes)
        conflicts = self.block_service.find_conflicts(
            professional_id, candidate, exclude_ids=[block.id]
        )
        return ChangeProposal(interval=candidate, conflicts=conflicts)

    @BaseService.measure_operation("propose_change")
    def propose(self, professional_id: str, change: PendingChangeRequest) -> ChangeProposal:
        """
        Validate a move or resize without writing anything.

        Blocks skip working hours. A booking that lands outside working
        hours is flagged for confirmation rather than rejected; conflicts
        make the proposal not ok and can never be overridden.

        Raises:
            NotFoundException: unknown booking or block
            MisconfiguredHoursException: the target day's hours are broken
            InvalidStatusTransitionException: the booking is completed or cancelled
        """
        if change.entity_type == "booking":
            proposal = self._propose_booking(professional_id, change)
        else:
            proposal = self._propose_block(professional_id, change)

        self.log_operation(
            "propose_change",
            entity_type=change.entity_type,
            entity_id=change.entity_id,
            change_kind=change.kind,
            ok=proposal.ok,
            outside_working_hours=proposal.outside_working_hours,
        )
        return proposal

    @BaseService.measure_operation("confirm_change")
    def confirm(
        self,
        professional_id: str,
        change: PendingChangeRequest,
        allow_outside_hours: bool = False,
    ) -> Union[Booking, CalendarBlock]:
        """
        Re-validate and commit a previously proposed change.

        Raises:
            OutsideWorkingHoursException: out of hours without the override
            TimeSlotUnavailableException: the slot is taken
        """
        if change.entity_type == "block":
            return self.block_service.move_block(
                professional_id,
                change.entity_id,
                change.next_start if change.kind == "move" else None,
                change.next_duration_minutes,
            )

        if change.kind == "resize":
            return self.booking_service.resize_booking(
                professional_id,
                change.entity_id,
                change.next_duration_minutes,
                allow_outside_hours=allow_outside_hours,
            )
        return self.booking_service.reschedule_booking(
            professional_id,
            change.entity_id,
            change.next_start,
            change.next_duration_minutes,
            allow_outside_hours=allow_outside_hours,
        )

    def cancel(self, professional_id: str, change: PendingChangeRequest) -> bool:
        """Abandon a proposal. Nothing was reserved, so this only acknowledges."""
        self.log_operation(
            "cancel_change",
            professional_id=professional_id,
            entity_type=change.entity_type,
            entity_id=change.entity_id,
        )
        return True
