# backend/app/models/last_minute.py
"""
Last-minute opening configuration.

One settings row per professional, with optional per-service rules and
blackout blocks hanging off it.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import TimestampMixin, UTCDateTime

WEEKDAY_DISABLE_COLUMNS = {
    "mon": "disable_mon",
    "tue": "disable_tue",
    "wed": "disable_wed",
    "thu": "disable_thu",
    "fri": "disable_fri",
    "sat": "disable_sat",
    "sun": "disable_sun",
}


class LastMinuteSettings(TimestampMixin, Base):
    __tablename__ = "last_minute_settings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    professional_id = Column(
        String(26), ForeignKey("professional_profiles.id"), nullable=False, unique=True
    )
    enabled = Column(Boolean, nullable=False, default=False)
    discounts_enabled = Column(Boolean, nullable=False, default=False)
    window_same_day_pct = Column(Integer, nullable=False, default=10)
    window_24h_pct = Column(Integer, nullable=False, default=20)
    min_price_cents = Column(Integer, nullable=True)

    disable_mon = Column(Boolean, nullable=False, default=False)
    disable_tue = Column(Boolean, nullable=False, default=False)
    disable_wed = Column(Boolean, nullable=False, default=False)
    disable_thu = Column(Boolean, nullable=False, default=False)
    disable_fri = Column(Boolean, nullable=False, default=False)
    disable_sat = Column(Boolean, nullable=False, default=False)
    disable_sun = Column(Boolean, nullable=False, default=False)

    service_rules = relationship(
        "LastMinuteServiceRule", back_populates="settings", cascade="all, delete-orphan"
    )
    blocks = relationship(
        "LastMinuteBlock",
        back_populates="settings",
        cascade="all, delete-orphan",
        order_by="LastMinuteBlock.start_at",
    )

    __table_args__ = (
        CheckConstraint("window_same_day_pct BETWEEN 0 AND 50", name="ck_lm_same_day_pct"),
        CheckConstraint("window_24h_pct BETWEEN 0 AND 50", name="ck_lm_24h_pct"),
        CheckConstraint("min_price_cents IS NULL OR min_price_cents >= 0", name="ck_lm_min_price"),
    )

    @property
    def disabled_weekdays(self) -> frozenset:
        return frozenset(
            day for day, column in WEEKDAY_DISABLE_COLUMNS.items() if getattr(self, column)
        )


class LastMinuteServiceRule(TimestampMixin, Base):
    __tablename__ = "last_minute_service_rules"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    settings_id = Column(String(26), ForeignKey("last_minute_settings.id"), nullable=False)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    min_price_cents = Column(Integer, nullable=True)

    settings = relationship("LastMinuteSettings", back_populates="service_rules")

    __table_args__ = (
        UniqueConstraint("settings_id", "service_id", name="uq_lm_rule_settings_service"),
        CheckConstraint(
            "min_price_cents IS NULL OR min_price_cents >= 0", name="ck_lm_rule_min_price"
        ),
    )


class LastMinuteBlock(TimestampMixin, Base):
    __tablename__ = "last_minute_blocks"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    settings_id = Column(String(26), ForeignKey("last_minute_settings.id"), nullable=False)
    start_at = Column(UTCDateTime(), nullable=False)
    end_at = Column(UTCDateTime(), nullable=False)
    reason = Column(Text, nullable=True)

    settings = relationship("LastMinuteSettings", back_populates="blocks")

    __table_args__ = (CheckConstraint("end_at > start_at", name="ck_lm_blocks_order"),)
