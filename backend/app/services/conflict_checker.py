# backend/app/services/conflict_checker.py
"""
Conflict Checker Service for the salon scheduling platform.

Loads the commitments near a candidate interval and runs the overlap
predicate against them. A single collision rejects the candidate; the
colliding commitments are returned for diagnostics.
"""

from datetime import datetime
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..database import with_db_retry
from ..domain.intervals import Commitment, TimeInterval, find_conflicts, neighborhood_window
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """Availability conflict detection for one professional's calendar."""

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    def load_commitments(
        self,
        professional_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_ids: Sequence[str] = (),
    ) -> List[Commitment]:
        return with_db_retry(
            "find_commitments_in_range",
            lambda: self.repository.find_commitments_in_range(
                professional_id, range_start, range_end, exclude_ids=exclude_ids
            ),
        )

    @BaseService.measure_operation("check_conflicts")
    def check_conflicts(
        self,
        professional_id: str,
        candidate: TimeInterval,
        *,
        duration_minutes: int,
        buffer_minutes: int = 0,
        exclude_ids: Sequence[str] = (),
    ) -> List[Commitment]:
        """
        Return the commitments that collide with ``candidate``.

        Args:
            professional_id: Calendar owner
            candidate: Interval being proposed, buffer included
            duration_minutes: Service length used to size the lookup window
            buffer_minutes: Buffer length used to size the lookup window
            exclude_ids: Commitments to ignore, e.g. the booking being moved

        Returns:
            Colliding commitments in start order; empty when the slot is free
        """
        window = neighborhood_window(candidate.start, duration_minutes, buffer_minutes)
        # The window must also reach the candidate's own end.
        range_end = max(window.end, candidate.end)
        existing = self.load_commitments(
            professional_id, window.start, range_end, exclude_ids=exclude_ids
        )
        conflicts = find_conflicts(candidate, existing, exclude_ids=exclude_ids)

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} conflicts for professional {professional_id} "
                f"at {candidate.start.isoformat()}"
            )
        return conflicts
