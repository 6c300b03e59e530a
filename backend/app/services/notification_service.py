# backend/app/services/notification_service.py
"""
Client notification dispatch.

Delivery is best-effort: every notification is written after the
booking change it describes has been committed, and any failure here is
logged and dropped. A dedupe key makes repeats harmless.
"""

from enum import Enum
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.booking import Booking
from ..models.notification import ClientNotification
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.notification_repository import NotificationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    BOOKING_CREATED = "BOOKING_CREATED"
    BOOKING_REQUESTED = "BOOKING_REQUESTED"
    BOOKING_ACCEPTED = "BOOKING_ACCEPTED"
    BOOKING_RESCHEDULED = "BOOKING_RESCHEDULED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"


_TITLES = {
    NotificationEvent.BOOKING_CREATED: "New appointment booked",
    NotificationEvent.BOOKING_REQUESTED: "Appointment requested",
    NotificationEvent.BOOKING_ACCEPTED: "Appointment confirmed",
    NotificationEvent.BOOKING_RESCHEDULED: "Appointment updated",
    NotificationEvent.BOOKING_CANCELLED: "Appointment cancelled",
}


class NotificationService(BaseService):
    def __init__(self, db: Session, repository: Optional[NotificationRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_notification_repository(db)

    @staticmethod
    def dedupe_key_for(event: NotificationEvent, booking: Booking) -> str:
        if event is NotificationEvent.BOOKING_RESCHEDULED:
            return f"{event.value}:{booking.id}:{booking.scheduled_for.isoformat()}"
        return f"{event.value}:{booking.id}"

    def notify_booking(
        self, event: NotificationEvent, booking: Booking
    ) -> Optional[ClientNotification]:
        """
        Record a client notification for ``booking``.

        Returns the notification, or None when disabled, duplicated or failed.
        Never raises.
        """
        if not settings.notifications_enabled:
            return None

        dedupe_key = self.dedupe_key_for(event, booking)
        try:
            if self.repository.exists_for_key(dedupe_key):
                prometheus_metrics.record_notification(event.value, "duplicate")
                return None

            with self.db.begin_nested():
                notification = self.repository.create(
                    client_id=booking.client_id,
                    professional_id=booking.professional_id,
                    booking_id=booking.id,
                    event_type=event.value,
                    title=_TITLES[event],
                    body=f"Starts {booking.scheduled_for.isoformat()}",
                    href=f"/client/bookings/{booking.id}",
                    dedupe_key=dedupe_key,
                )
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            prometheus_metrics.record_notification(event.value, "error")
            logger.warning(
                "client_notification_failed",
                extra={
                    "booking_id": booking.id,
                    "event_type": event.value,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return None

        prometheus_metrics.record_notification(event.value, "created")
        return notification
