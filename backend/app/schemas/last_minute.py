"""
Last-minute settings, rules, blocks and classification DTOs.

Prices are decimal strings on the wire ("79.99") and integer cents inside.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field, field_validator, model_validator

from ..core.timezone_utils import WEEKDAY_KEYS
from ..domain.last_minute import (
    MAX_DISCOUNT_PCT,
    Classification,
    IneligibleReason,
    LastMinuteTier,
    Opening,
)
from ..domain.money import format_cents, to_cents
from ..models.last_minute import LastMinuteBlock, LastMinuteServiceRule, LastMinuteSettings
from ._strict_base import StrictModel, StrictRequestModel

MoneyField = Optional[Union[str, int, float]]


class LastMinuteServiceRuleResponse(StrictModel):
    service_id: str
    enabled: bool
    min_price: Optional[str] = None

    @classmethod
    def from_rule(cls, rule: LastMinuteServiceRule) -> "LastMinuteServiceRuleResponse":
        return cls(
            service_id=rule.service_id,
            enabled=bool(rule.enabled),
            min_price=format_cents(rule.min_price_cents),
        )


class LastMinuteBlockResponse(StrictModel):
    id: str
    start_at: datetime
    end_at: datetime
    reason: Optional[str] = None

    @classmethod
    def from_block(cls, block: LastMinuteBlock) -> "LastMinuteBlockResponse":
        return cls(id=block.id, start_at=block.start_at, end_at=block.end_at, reason=block.reason)


class LastMinuteSettingsResponse(StrictModel):
    enabled: bool
    discounts_enabled: bool
    window_same_day_pct: int
    window_24h_pct: int = Field(..., alias="window24hPct")
    min_price: Optional[str] = None
    disabled_weekdays: List[str] = Field(default_factory=list)
    service_rules: List[LastMinuteServiceRuleResponse] = Field(default_factory=list)
    blocks: List[LastMinuteBlockResponse] = Field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: LastMinuteSettings) -> "LastMinuteSettingsResponse":
        return cls(
            enabled=bool(settings.enabled),
            discounts_enabled=bool(settings.discounts_enabled),
            window_same_day_pct=settings.window_same_day_pct,
            window_24h_pct=settings.window_24h_pct,
            min_price=format_cents(settings.min_price_cents),
            disabled_weekdays=[day for day in WEEKDAY_KEYS if day in settings.disabled_weekdays],
            service_rules=[
                LastMinuteServiceRuleResponse.from_rule(rule) for rule in settings.service_rules
            ],
            blocks=[LastMinuteBlockResponse.from_block(block) for block in settings.blocks],
        )


class LastMinuteSettingsUpdate(StrictRequestModel):
    """Partial update. Send ``minPrice: null`` to clear the floor."""

    enabled: Optional[bool] = None
    discounts_enabled: Optional[bool] = None
    window_same_day_pct: Optional[int] = Field(None, ge=0, le=MAX_DISCOUNT_PCT)
    window_24h_pct: Optional[int] = Field(None, ge=0, le=MAX_DISCOUNT_PCT, alias="window24hPct")
    min_price: MoneyField = None
    disabled_weekdays: Optional[List[str]] = None

    @field_validator("disabled_weekdays")
    @classmethod
    def validate_weekdays(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        days = [day.strip().lower() for day in value]
        unknown = sorted(set(days) - set(WEEKDAY_KEYS))
        if unknown:
            raise ValueError(f"Unknown weekday keys: {', '.join(unknown)}")
        return days

    @field_validator("min_price")
    @classmethod
    def validate_min_price(cls, value: MoneyField) -> MoneyField:
        to_cents(value)
        return value

    @property
    def min_price_cents(self) -> Optional[int]:
        return to_cents(self.min_price)


class LastMinuteRuleUpdate(StrictRequestModel):
    service_id: str = Field(..., min_length=1)
    enabled: Optional[bool] = None
    min_price: MoneyField = None

    @field_validator("min_price")
    @classmethod
    def validate_min_price(cls, value: MoneyField) -> MoneyField:
        to_cents(value)
        return value

    @property
    def min_price_cents(self) -> Optional[int]:
        return to_cents(self.min_price)


class LastMinuteBlockCreate(StrictRequestModel):
    start_at: datetime
    end_at: datetime
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_order(self) -> "LastMinuteBlockCreate":
        if self.end_at <= self.start_at:
            raise ValueError("endAt must be after startAt")
        return self


class ClassifyRequest(StrictRequestModel):
    start_at: datetime
    end_at: Optional[datetime] = None
    service_id: Optional[str] = None
    base_price: MoneyField = Field(
        None, description="Defaults to the professional's salon price for the service"
    )
    now: Optional[datetime] = Field(None, description="Evaluation instant; defaults to server time")

    @field_validator("base_price")
    @classmethod
    def validate_base_price(cls, value: MoneyField) -> MoneyField:
        to_cents(value)
        return value

    @property
    def base_price_cents(self) -> Optional[int]:
        return to_cents(self.base_price)


class ClassifyResponse(StrictModel):
    eligible: bool
    tier: Optional[LastMinuteTier] = None
    discount_pct: Optional[int] = None
    discounted_price: Optional[str] = None
    reason: Optional[IneligibleReason] = None

    @classmethod
    def from_classification(cls, result: Classification) -> "ClassifyResponse":
        return cls(
            eligible=result.eligible,
            tier=result.tier,
            discount_pct=result.discount_pct,
            discounted_price=format_cents(result.discounted_price_cents),
            reason=result.reason,
        )


class OpeningResponse(StrictModel):
    professional_id: str
    service_id: str
    start_at: datetime
    end_at: datetime
    tier: LastMinuteTier
    discount_pct: int
    base_price: Optional[str] = None
    discounted_price: Optional[str] = None

    @classmethod
    def from_opening(cls, opening: Opening) -> "OpeningResponse":
        return cls(
            professional_id=opening.professional_id,
            service_id=opening.service_id,
            start_at=opening.start_at,
            end_at=opening.end_at,
            tier=opening.tier,
            discount_pct=opening.discount_pct,
            base_price=format_cents(opening.base_price_cents),
            discounted_price=format_cents(opening.discounted_price_cents),
        )


class OpeningListResponse(StrictModel):
    openings: List[OpeningResponse]
