# backend/app/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository for the salon scheduling platform.

Loads everything that can occupy a professional's calendar near a
candidate interval: live bookings, calendar blocks and last-minute
blackout blocks. Cancelled bookings are filtered out here, before any
overlap test runs.
"""

from datetime import datetime, timedelta
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..domain.intervals import Commitment, TimeInterval
from ..models.booking import Booking, BookingStatus
from ..models.calendar_block import CalendarBlock
from ..models.last_minute import LastMinuteBlock, LastMinuteSettings
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConflictCheckerRepository(BaseRepository[Booking]):
    """Read-only queries behind availability conflict detection."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def get_bookings_starting_in(
        self,
        professional_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Live bookings whose start falls in ``[range_start, range_end)``.

        Booking ends are derived, so the range is on start times; callers
        widen ``range_start`` to cover long appointments.
        """
        query = self.db.query(Booking).filter(
            Booking.professional_id == professional_id,
            Booking.status != BookingStatus.CANCELLED.value,
            Booking.scheduled_for >= range_start,
            Booking.scheduled_for < range_end,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query.order_by(Booking.scheduled_for))

    def get_calendar_blocks_overlapping(
        self,
        professional_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_block_id: Optional[str] = None,
    ) -> List[CalendarBlock]:
        query = self.db.query(CalendarBlock).filter(
            CalendarBlock.professional_id == professional_id,
            CalendarBlock.start_at < range_end,
            CalendarBlock.end_at > range_start,
        )
        if exclude_block_id:
            query = query.filter(CalendarBlock.id != exclude_block_id)
        return self._execute_query(query.order_by(CalendarBlock.start_at))

    def get_last_minute_blocks_overlapping(
        self, professional_id: str, range_start: datetime, range_end: datetime
    ) -> List[LastMinuteBlock]:
        query = (
            self.db.query(LastMinuteBlock)
            .join(LastMinuteSettings, LastMinuteBlock.settings_id == LastMinuteSettings.id)
            .filter(
                LastMinuteSettings.professional_id == professional_id,
                LastMinuteBlock.start_at < range_end,
                LastMinuteBlock.end_at > range_start,
            )
        )
        return self._execute_query(query.order_by(LastMinuteBlock.start_at))

    def find_commitments_in_range(
        self,
        professional_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_ids: Sequence[str] = (),
    ) -> List[Commitment]:
        """
        Everything occupying the calendar around ``[range_start, range_end)``.

        Bookings are selected by start time inside the range; blocks by true
        overlap since their end is stored.
        """
        commitments: List[Commitment] = []

        for booking in self.get_bookings_starting_in(professional_id, range_start, range_end):
            if booking.id in exclude_ids:
                continue
            commitments.append(
                Commitment(
                    kind="booking",
                    id=booking.id,
                    interval=TimeInterval(
                        booking.scheduled_for,
                        booking.scheduled_for + timedelta(minutes=booking.occupied_minutes),
                    ),
                    label=booking.status,
                )
            )

        for block in self.get_calendar_blocks_overlapping(professional_id, range_start, range_end):
            if block.id in exclude_ids:
                continue
            commitments.append(
                Commitment(
                    kind="calendar_block",
                    id=block.id,
                    interval=TimeInterval(block.start_at, block.end_at),
                    label=block.note,
                )
            )

        for lm_block in self.get_last_minute_blocks_overlapping(
            professional_id, range_start, range_end
        ):
            if lm_block.id in exclude_ids:
                continue
            commitments.append(
                Commitment(
                    kind="last_minute_block",
                    id=lm_block.id,
                    interval=TimeInterval(lm_block.start_at, lm_block.end_at),
                    label=lm_block.reason,
                )
            )

        return commitments
