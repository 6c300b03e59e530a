# backend/app/repositories/booking_repository.py
"""
Booking Repository for the salon scheduling platform.

Handles:
- Atomic creation of a booking with its per-service line items
- Schedule updates (move/resize)
- Lookups with line items eager loaded
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, selectinload

from ..models.booking import Booking, BookingServiceItem
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(Booking.service_items))

    def create_with_items(
        self, booking_data: Dict[str, Any], items: Sequence[Dict[str, Any]]
    ) -> Booking:
        """
        Insert a booking and its line items in one flush.

        IntegrityError is re-raised untouched so the service can translate a
        lost race into a slot conflict.
        """
        booking = Booking(**booking_data)
        for index, item in enumerate(items):
            booking.service_items.append(BookingServiceItem(sort_order=index, **item))
        self.db.add(booking)
        try:
            self.db.flush()
        except IntegrityError:
            self.logger.warning(
                "Booking insert rejected by constraint",
                extra={"professional_id": booking_data.get("professional_id")},
            )
            raise
        return booking

    def update_schedule(
        self,
        booking: Booking,
        *,
        scheduled_for: datetime,
        total_duration_minutes: int,
        buffer_minutes: int,
    ) -> Booking:
        booking.scheduled_for = scheduled_for
        booking.total_duration_minutes = total_duration_minutes
        booking.buffer_minutes = buffer_minutes
        self.db.flush()
        return booking

    def list_for_professional(
        self,
        professional_id: str,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[Booking]:
        query = self._apply_eager_loading(
            self.db.query(Booking).filter(Booking.professional_id == professional_id)
        )
        if range_start is not None:
            query = query.filter(Booking.scheduled_for >= range_start)
        if range_end is not None:
            query = query.filter(Booking.scheduled_for < range_end)
        if statuses:
            query = query.filter(Booking.status.in_(list(statuses)))
        return self._execute_query(query.order_by(Booking.scheduled_for))

    def get_for_professional(self, booking_id: str, professional_id: str) -> Optional[Booking]:
        results = self._execute_query(
            self._apply_eager_loading(self.db.query(Booking))
            .filter(Booking.id == booking_id, Booking.professional_id == professional_id)
            .limit(1)
        )
        return results[0] if results else None
