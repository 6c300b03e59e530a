# backend/app/models/professional.py
"""
Professional and client profiles.

A professional owns the calendar: their IANA time zone and weekly
working hours are what every scheduling rule is evaluated against.
"""

import logging
from typing import Any, Dict

from sqlalchemy import JSON, Column, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import TimestampMixin

logger = logging.getLogger(__name__)


class ProfessionalProfile(TimestampMixin, Base):
    __tablename__ = "professional_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    display_name = Column(String(120), nullable=False)
    time_zone = Column(String(64), nullable=False)
    working_hours = Column(JSON, nullable=True)

    offerings = relationship(
        "ProfessionalServiceOffering", back_populates="professional", cascade="all, delete-orphan"
    )
    bookings = relationship("Booking", back_populates="professional")
    calendar_blocks = relationship(
        "CalendarBlock", back_populates="professional", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ProfessionalProfile {self.id}: tz={self.time_zone}>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "time_zone": self.time_zone,
            "working_hours": self.working_hours,
        }


class ClientProfile(TimestampMixin, Base):
    __tablename__ = "client_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    display_name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=True)

    bookings = relationship("Booking", back_populates="client")
    notifications = relationship("ClientNotification", back_populates="client")

    def __repr__(self) -> str:
        return f"<ClientProfile {self.id}>"
