"""
Last-minute opening classification.

Evaluation always takes ``now`` as an argument; tier membership shifts as
time passes, so nothing here is cacheable per professional or service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from app.core.timezone_utils import ensure_utc, utc_to_civil

from .intervals import TimeInterval, overlaps
from .money import apply_discount

MAX_DISCOUNT_PCT = 50
LAST_MINUTE_HORIZON = timedelta(hours=24)


class LastMinuteTier(str, Enum):
    SAME_DAY = "SAME_DAY"
    WITHIN_24H = "WITHIN_24H"


class IneligibleReason(str, Enum):
    DISABLED = "DISABLED"
    WEEKDAY_DISABLED = "WEEKDAY_DISABLED"
    BLOCKED = "BLOCKED"
    SERVICE_DISABLED = "SERVICE_DISABLED"
    IN_PAST = "IN_PAST"
    OUTSIDE_HORIZON = "OUTSIDE_HORIZON"
    BELOW_PRICE_FLOOR = "BELOW_PRICE_FLOOR"


def clamp_pct(value: Any) -> int:
    try:
        pct = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(MAX_DISCOUNT_PCT, pct))


@dataclass(frozen=True)
class ServiceRule:
    enabled: bool = True
    min_price_cents: Optional[int] = None


@dataclass(frozen=True)
class LastMinutePolicy:
    """Read-only snapshot of a professional's last-minute configuration."""

    enabled: bool = False
    discounts_enabled: bool = False
    same_day_pct: int = 0
    within_24h_pct: int = 0
    min_price_cents: Optional[int] = None
    disabled_weekdays: FrozenSet[str] = frozenset()
    service_rules: Mapping[str, ServiceRule] = field(default_factory=dict)
    blocks: Tuple[TimeInterval, ...] = ()

    def pct_for(self, tier: LastMinuteTier) -> int:
        if tier is LastMinuteTier.SAME_DAY:
            return clamp_pct(self.same_day_pct)
        return clamp_pct(self.within_24h_pct)

    def price_floor(self, service_id: Optional[str]) -> int:
        rule = self.service_rules.get(service_id) if service_id else None
        rule_min = rule.min_price_cents if rule else None
        return max(self.min_price_cents or 0, rule_min or 0)


@dataclass(frozen=True)
class Classification:
    eligible: bool
    tier: Optional[LastMinuteTier] = None
    discount_pct: Optional[int] = None
    discounted_price_cents: Optional[int] = None
    reason: Optional[IneligibleReason] = None

    @classmethod
    def rejected(
        cls, reason: IneligibleReason, tier: Optional[LastMinuteTier] = None
    ) -> "Classification":
        return cls(eligible=False, tier=tier, reason=reason)


@dataclass(frozen=True)
class Opening:
    professional_id: str
    service_id: str
    start_at: datetime
    end_at: datetime
    tier: LastMinuteTier
    discount_pct: int
    base_price_cents: Optional[int] = None
    discounted_price_cents: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "professional_id": self.professional_id,
            "service_id": self.service_id,
            "start_at": self.start_at,
            "end_at": self.end_at,
            "tier": self.tier.value,
            "discount_pct": self.discount_pct,
            "base_price_cents": self.base_price_cents,
            "discounted_price_cents": self.discounted_price_cents,
        }


def resolve_tier(
    start: datetime, now: datetime, time_zone: str
) -> Tuple[Optional[LastMinuteTier], Optional[IneligibleReason]]:
    start = ensure_utc(start)
    now = ensure_utc(now)
    if start <= now:
        return None, IneligibleReason.IN_PAST
    if utc_to_civil(start, time_zone).date == utc_to_civil(now, time_zone).date:
        return LastMinuteTier.SAME_DAY, None
    if start - now <= LAST_MINUTE_HORIZON:
        return LastMinuteTier.WITHIN_24H, None
    return None, IneligibleReason.OUTSIDE_HORIZON


def classify(
    policy: LastMinutePolicy,
    start: datetime,
    now: datetime,
    time_zone: str,
    *,
    service_id: Optional[str] = None,
    base_price_cents: Optional[int] = None,
    end: Optional[datetime] = None,
) -> Classification:
    """
    Decide whether an opening starting at ``start`` qualifies as last-minute.

    A discount that would push the price under the floor rejects the slot
    rather than shrinking the advertised percentage.
    """
    if not policy.enabled:
        return Classification.rejected(IneligibleReason.DISABLED)

    if utc_to_civil(start, time_zone).weekday_key in policy.disabled_weekdays:
        return Classification.rejected(IneligibleReason.WEEKDAY_DISABLED)

    start = ensure_utc(start)
    if end is not None:
        candidate = TimeInterval(start, ensure_utc(end))
        blocked = any(overlaps(candidate, block) for block in policy.blocks)
    else:
        blocked = any(block.contains(start) for block in policy.blocks)
    if blocked:
        return Classification.rejected(IneligibleReason.BLOCKED)

    rule = policy.service_rules.get(service_id) if service_id else None
    if rule is not None and not rule.enabled:
        return Classification.rejected(IneligibleReason.SERVICE_DISABLED)

    tier, reason = resolve_tier(start, now, time_zone)
    if tier is None:
        return Classification.rejected(reason)  # type: ignore[arg-type]

    pct = policy.pct_for(tier) if policy.discounts_enabled else 0

    discounted: Optional[int] = None
    if base_price_cents is not None:
        discounted = apply_discount(base_price_cents, pct)
        if discounted < policy.price_floor(service_id):
            return Classification.rejected(IneligibleReason.BELOW_PRICE_FLOOR, tier=tier)

    return Classification(
        eligible=True, tier=tier, discount_pct=pct, discounted_price_cents=discounted
    )
