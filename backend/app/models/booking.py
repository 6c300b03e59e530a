# backend/app/models/booking.py
"""
Booking model for the salon scheduling platform.

A booking occupies ``[scheduled_for, scheduled_for + duration + buffer)``
on the professional's calendar. Instants are stored as UTC; wall-clock
rules are applied by the services in the professional's zone.

Bookings are never deleted. They only move through the status lifecycle:
PENDING -> ACCEPTED -> COMPLETED, and PENDING/ACCEPTED -> CANCELLED.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
import logging
from typing import Any, Dict, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
import ulid

from app.core.exceptions import InvalidStatusTransitionException

from ..database import Base
from .types import TimestampMixin, UTCDateTime

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Requested, awaiting the professional
    ACCEPTED = "ACCEPTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class LocationType(str, Enum):
    """Where the appointment takes place."""

    SALON = "SALON"
    MOBILE = "MOBILE"


ALLOWED_TRANSITIONS: Dict[BookingStatus, frozenset] = {
    BookingStatus.PENDING: frozenset({BookingStatus.ACCEPTED, BookingStatus.CANCELLED}),
    BookingStatus.ACCEPTED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    professional_id = Column(String(26), ForeignKey("professional_profiles.id"), nullable=False)
    client_id = Column(String(26), ForeignKey("client_profiles.id"), nullable=False)

    scheduled_for = Column(UTCDateTime(), nullable=False)
    total_duration_minutes = Column(Integer, nullable=False)
    buffer_minutes = Column(Integer, nullable=False, default=0)
    subtotal_cents = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    location_type = Column(String(20), nullable=False, default=LocationType.SALON.value)
    notes = Column(Text, nullable=True)

    accepted_at = Column(UTCDateTime(), nullable=True)
    completed_at = Column(UTCDateTime(), nullable=True)
    cancelled_at = Column(UTCDateTime(), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    professional = relationship("ProfessionalProfile", back_populates="bookings")
    client = relationship("ClientProfile", back_populates="bookings")
    service_items = relationship(
        "BookingServiceItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingServiceItem.sort_order",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'ACCEPTED', 'COMPLETED', 'CANCELLED')",
            name="ck_bookings_status",
        ),
        CheckConstraint("location_type IN ('SALON', 'MOBILE')", name="ck_bookings_location_type"),
        CheckConstraint(
            "total_duration_minutes BETWEEN 15 AND 720 AND total_duration_minutes % 15 = 0",
            name="ck_bookings_duration_grid",
        ),
        CheckConstraint(
            "buffer_minutes BETWEEN 0 AND 180 AND buffer_minutes % 15 = 0",
            name="ck_bookings_buffer_grid",
        ),
        CheckConstraint("subtotal_cents >= 0", name="ck_bookings_subtotal_non_negative"),
        Index("ix_bookings_professional_scheduled_for", "professional_id", "scheduled_for"),
        # Two live bookings can never share a start; the losing insert of a race fails here.
        Index(
            "uq_bookings_professional_start_live",
            "professional_id",
            "scheduled_for",
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: professional={self.professional_id}, "
            f"client={self.client_id}, start={self.scheduled_for}, "
            f"minutes={self.total_duration_minutes}+{self.buffer_minutes}, status={self.status}>"
        )

    @property
    def occupied_minutes(self) -> int:
        return int(self.total_duration_minutes or 0) + int(self.buffer_minutes or 0)

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_for + timedelta(minutes=self.occupied_minutes)

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status_enum in TERMINAL_STATUSES

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status_enum]

    def _transition(self, target: BookingStatus) -> None:
        if not self.can_transition_to(target):
            raise InvalidStatusTransitionException(self.status, target.value)
        self.status = target.value

    def accept(self) -> None:
        self._transition(BookingStatus.ACCEPTED)
        self.accepted_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} accepted")

    def complete(self) -> None:
        self._transition(BookingStatus.COMPLETED)
        self.completed_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} marked as completed")

    def cancel(self, reason: Optional[str] = None) -> None:
        self._transition(BookingStatus.CANCELLED)
        self.cancelled_at = datetime.now(timezone.utc)
        self.cancellation_reason = reason
        logger.info(f"Booking {self.id} cancelled")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "professional_id": self.professional_id,
            "client_id": self.client_id,
            "scheduled_for": self.scheduled_for,
            "ends_at": self.ends_at,
            "total_duration_minutes": self.total_duration_minutes,
            "buffer_minutes": self.buffer_minutes,
            "subtotal_cents": self.subtotal_cents,
            "status": self.status,
            "location_type": self.location_type,
            "notes": self.notes,
            "service_items": [item.to_dict() for item in self.service_items],
        }


class BookingServiceItem(Base):
    """Per-service line item, snapshotted at booking time."""

    __tablename__ = "booking_service_items"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False, index=True)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    offering_id = Column(
        String(26), ForeignKey("professional_service_offerings.id"), nullable=False
    )
    service_name = Column(String(120), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    booking = relationship("Booking", back_populates="service_items")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_id": self.service_id,
            "service_name": self.service_name,
            "duration_minutes": self.duration_minutes,
            "price_cents": self.price_cents,
        }
