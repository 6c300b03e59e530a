# backend/app/repositories/calendar_block_repository.py
from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.calendar_block import CalendarBlock
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CalendarBlockRepository(BaseRepository[CalendarBlock]):
    def __init__(self, db: Session):
        super().__init__(db, CalendarBlock)

    def get_for_professional(self, block_id: str, professional_id: str) -> Optional[CalendarBlock]:
        return self.find_one_by(id=block_id, professional_id=professional_id)

    def list_for_professional(
        self,
        professional_id: str,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
    ) -> List[CalendarBlock]:
        query = self.db.query(CalendarBlock).filter(
            CalendarBlock.professional_id == professional_id
        )
        if range_end is not None:
            query = query.filter(CalendarBlock.start_at < range_end)
        if range_start is not None:
            query = query.filter(CalendarBlock.end_at > range_start)
        return self._execute_query(query.order_by(CalendarBlock.start_at))

    def update_range(
        self, block: CalendarBlock, start_at: datetime, end_at: datetime
    ) -> CalendarBlock:
        block.start_at = start_at
        block.end_at = end_at
        self.db.flush()
        return block
