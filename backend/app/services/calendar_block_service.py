# backend/app/services/calendar_block_service.py
"""
Calendar blocks: personal time a professional keeps off the books.

Blocks participate in conflict detection exactly like bookings but are
never subject to working hours.
"""

from datetime import datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.booking_lock import schedule_lock
from ..core.exceptions import (
    NotFoundException,
    TimeSlotUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc
from ..database import with_db_retry
from ..domain.duration_grid import snap_to_grid
from ..domain.intervals import Commitment, TimeInterval
from ..models.calendar_block import MAX_BLOCK, MIN_BLOCK, CalendarBlock
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)

_LOCK_BUSY_MESSAGE = "Another change to this calendar is in progress. Please try again."


def _validate_length(minutes: int) -> None:
    length = timedelta(minutes=minutes)
    if length < MIN_BLOCK or length > MAX_BLOCK:
        raise ValidationException(
            "Blocked time must be between 15 minutes and 24 hours.",
            details={"minutes": minutes},
        )


class CalendarBlockService(BaseService):
    def __init__(self, db: Session, conflict_checker: Optional[ConflictChecker] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_calendar_block_repository(db)
        self.professional_repository = RepositoryFactory.create_professional_profile_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)

    def get_block(self, professional_id: str, block_id: str) -> CalendarBlock:
        block = with_db_retry(
            "get_calendar_block",
            lambda: self.repository.get_for_professional(block_id, professional_id),
        )
        if not block:
            raise NotFoundException("Blocked time not found", details={"id": block_id})
        return block

    def list_blocks(
        self,
        professional_id: str,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
    ) -> List[CalendarBlock]:
        return with_db_retry(
            "list_calendar_blocks",
            lambda: self.repository.list_for_professional(professional_id, range_start, range_end),
        )

    @staticmethod
    def candidate_for(
        block: CalendarBlock,
        next_start: Optional[datetime] = None,
        next_duration_minutes: Optional[int] = None,
    ) -> TimeInterval:
        start = ensure_utc(next_start) if next_start is not None else block.start_at
        if next_duration_minutes is not None:
            minutes = snap_to_grid(next_duration_minutes)
        else:
            minutes = int((block.end_at - block.start_at).total_seconds() // 60)
        _validate_length(minutes)
        return TimeInterval.from_minutes(start, minutes)

    def find_conflicts(
        self, professional_id: str, candidate: TimeInterval, exclude_ids: List[str]
    ) -> List[Commitment]:
        return self.conflict_checker.check_conflicts(
            professional_id,
            candidate,
            duration_minutes=candidate.minutes,
            exclude_ids=exclude_ids,
        )

    def _lock_professional(self, professional_id: str) -> None:
        if not self.professional_repository.lock_for_scheduling(professional_id):
            raise NotFoundException("Professional not found", details={"id": professional_id})

    def _ensure_free(
        self, professional_id: str, candidate: TimeInterval, exclude_ids: List[str]
    ) -> None:
        conflicts = self.find_conflicts(professional_id, candidate, exclude_ids)
        if conflicts:
            prometheus_metrics.record_scheduling_rejection("TIME_SLOT_UNAVAILABLE")
            raise TimeSlotUnavailableException(
                "That time overlaps an existing booking or block.",
                conflicts=[conflict.to_dict() for conflict in conflicts],
            )

    @BaseService.measure_operation("create_calendar_block")
    def create_block(
        self,
        professional_id: str,
        start_at: datetime,
        end_at: datetime,
        note: Optional[str] = None,
    ) -> CalendarBlock:
        start_at, end_at = ensure_utc(start_at), ensure_utc(end_at)
        if end_at <= start_at:
            raise ValidationException("Blocked time must end after it starts.")
        candidate = TimeInterval(start_at, end_at)
        _validate_length(candidate.minutes)

        with schedule_lock(professional_id) as acquired:
            if not acquired:
                raise TimeSlotUnavailableException(_LOCK_BUSY_MESSAGE)
            with self.transaction():
                self._lock_professional(professional_id)
                self._ensure_free(professional_id, candidate, exclude_ids=[])
                block = self.repository.create(
                    professional_id=professional_id,
                    start_at=candidate.start,
                    end_at=candidate.end,
                    note=note,
                )

        self.log_operation(
            "create_calendar_block", block_id=block.id, professional_id=professional_id
        )
        return block

    @BaseService.measure_operation("move_calendar_block")
    def move_block(
        self,
        professional_id: str,
        block_id: str,
        next_start: Optional[datetime] = None,
        next_duration_minutes: Optional[int] = None,
    ) -> CalendarBlock:
        """Replace a block's interval; the block never conflicts with itself."""
        block = self.get_block(professional_id, block_id)
        candidate = self.candidate_for(block, next_start, next_duration_minutes)

        with schedule_lock(professional_id) as acquired:
            if not acquired:
                raise TimeSlotUnavailableException(_LOCK_BUSY_MESSAGE)
            with self.transaction():
                self._lock_professional(professional_id)
                self._ensure_free(professional_id, candidate, exclude_ids=[block.id])
                self.repository.update_range(block, candidate.start, candidate.end)

        self.log_operation(
            "move_calendar_block",
            block_id=block.id,
            start_at=candidate.start.isoformat(),
            end_at=candidate.end.isoformat(),
        )
        return block

    @BaseService.measure_operation("delete_calendar_block")
    def delete_block(self, professional_id: str, block_id: str) -> None:
        block = self.get_block(professional_id, block_id)
        with self.transaction():
            self.db.delete(block)
        self.log_operation("delete_calendar_block", block_id=block_id)
