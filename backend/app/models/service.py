# backend/app/models/service.py
"""
Service catalog and per-professional offerings.

Service is the shared catalog entry (default length and minimum price).
ProfessionalServiceOffering is what a professional actually sells, with
optional salon- and mobile-specific price and duration overrides.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .booking import LocationType
from .types import TimestampMixin


class Service(TimestampMixin, Base):
    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    default_duration_minutes = Column(Integer, nullable=False, default=60)
    min_price_cents = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    offerings = relationship("ProfessionalServiceOffering", back_populates="service")

    __table_args__ = (
        CheckConstraint("default_duration_minutes > 0", name="ck_services_duration_positive"),
        CheckConstraint(
            "min_price_cents IS NULL OR min_price_cents >= 0", name="ck_services_min_price"
        ),
    )

    def __repr__(self) -> str:
        return f"<Service {self.id}: {self.name}>"


class ProfessionalServiceOffering(TimestampMixin, Base):
    __tablename__ = "professional_service_offerings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    professional_id = Column(
        String(26), ForeignKey("professional_profiles.id"), nullable=False, index=True
    )
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    offers_in_salon = Column(Boolean, nullable=False, default=True)
    offers_mobile = Column(Boolean, nullable=False, default=False)
    salon_price_cents = Column(Integer, nullable=True)
    mobile_price_cents = Column(Integer, nullable=True)
    salon_duration_minutes = Column(Integer, nullable=True)
    mobile_duration_minutes = Column(Integer, nullable=True)

    professional = relationship("ProfessionalProfile", back_populates="offerings")
    service = relationship("Service", back_populates="offerings")

    __table_args__ = (
        UniqueConstraint("professional_id", "service_id", name="uq_offering_professional_service"),
    )

    def offers(self, location_type: str) -> bool:
        if location_type == LocationType.MOBILE:
            return bool(self.offers_mobile)
        return bool(self.offers_in_salon)

    def duration_for(self, location_type: str) -> int:
        """Location-specific duration, else the catalog default."""
        if location_type == LocationType.MOBILE:
            override = self.mobile_duration_minutes
        else:
            override = self.salon_duration_minutes
        if override:
            return int(override)
        return int(self.service.default_duration_minutes)

    def price_cents_for(self, location_type: str) -> int:
        """Location-specific price, else the catalog minimum, else zero."""
        override: Optional[int]
        if location_type == LocationType.MOBILE:
            override = self.mobile_price_cents
        else:
            override = self.salon_price_cents
        if override is not None:
            return int(override)
        if self.service.min_price_cents is not None:
            return int(self.service.min_price_cents)
        return 0
