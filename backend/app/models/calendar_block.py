# backend/app/models/calendar_block.py
"""Personal time a professional has blocked off their calendar."""

from datetime import timedelta

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import TimestampMixin, UTCDateTime

MIN_BLOCK = timedelta(minutes=15)
MAX_BLOCK = timedelta(hours=24)


class CalendarBlock(TimestampMixin, Base):
    __tablename__ = "calendar_blocks"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    professional_id = Column(String(26), ForeignKey("professional_profiles.id"), nullable=False)
    start_at = Column(UTCDateTime(), nullable=False)
    end_at = Column(UTCDateTime(), nullable=False)
    note = Column(Text, nullable=True)

    professional = relationship("ProfessionalProfile", back_populates="calendar_blocks")

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="ck_calendar_blocks_order"),
        Index("ix_calendar_blocks_professional_range", "professional_id", "start_at", "end_at"),
    )

    def __repr__(self) -> str:
        return f"<CalendarBlock {self.id}: {self.start_at}-{self.end_at}>"
