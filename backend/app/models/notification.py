# backend/app/models/notification.py
"""In-app notifications shown to clients."""

from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import TimestampMixin


class ClientNotification(TimestampMixin, Base):
    __tablename__ = "client_notifications"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    client_id = Column(String(26), ForeignKey("client_profiles.id"), nullable=False, index=True)
    professional_id = Column(String(26), ForeignKey("professional_profiles.id"), nullable=True)
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=True)
    event_type = Column(String(40), nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=True)
    href = Column(String(255), nullable=True)
    # e.g. BOOKING_CREATED:<booking id>; repeats are ignored
    dedupe_key = Column(String(120), nullable=False, unique=True)

    client = relationship("ClientProfile", back_populates="notifications")
