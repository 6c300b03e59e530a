"""
Unit tests for last-minute classification.

``now`` is always passed in; the professional is in Los Angeles and
2025-03-03 is a Monday.
"""

from datetime import timedelta

import pytest

from app.domain.intervals import TimeInterval
from app.domain.last_minute import (
    IneligibleReason,
    LastMinutePolicy,
    LastMinuteTier,
    ServiceRule,
    clamp_pct,
    classify,
    resolve_tier,
)
from tests._utils import LOS_ANGELES, la_time

NOW = la_time(3, 14)  # Monday 14:00 local


def _policy(**overrides) -> LastMinutePolicy:
    values = dict(enabled=True, discounts_enabled=True, same_day_pct=20, within_24h_pct=10)
    values.update(overrides)
    return LastMinutePolicy(**values)


class TestTiers:
    def test_same_day_opening(self):
        result = classify(_policy(), la_time(3, 18), NOW, LOS_ANGELES)
        assert result.eligible
        assert result.tier is LastMinuteTier.SAME_DAY
        assert result.discount_pct == 20

    def test_next_morning_within_24_hours(self):
        result = classify(_policy(), la_time(4, 10), NOW, LOS_ANGELES)
        assert result.eligible
        assert result.tier is LastMinuteTier.WITHIN_24H
        assert result.discount_pct == 10

    def test_two_days_out_is_ineligible(self):
        result = classify(_policy(), la_time(5, 10), NOW, LOS_ANGELES)
        assert not result.eligible
        assert result.reason is IneligibleReason.OUTSIDE_HORIZON

    def test_just_past_24_hours_is_ineligible(self):
        result = classify(_policy(), la_time(4, 14, 15), NOW, LOS_ANGELES)
        assert result.reason is IneligibleReason.OUTSIDE_HORIZON

    def test_exactly_24_hours_is_within(self):
        tier, reason = resolve_tier(NOW + timedelta(hours=24), NOW, LOS_ANGELES)
        assert tier is LastMinuteTier.WITHIN_24H
        assert reason is None

    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(minutes=-15)])
    def test_start_at_or_before_now_is_in_the_past(self, offset):
        result = classify(_policy(), NOW + offset, NOW, LOS_ANGELES)
        assert result.reason is IneligibleReason.IN_PAST

    def test_same_day_is_judged_on_the_local_calendar(self):
        # 23:30 Monday and 00:30 Tuesday in Los Angeles are both Tuesday in UTC.
        now = la_time(3, 23, 30)
        tier, _ = resolve_tier(la_time(4, 0, 30), now, LOS_ANGELES)
        assert tier is LastMinuteTier.WITHIN_24H

    def test_tier_only_moves_toward_same_day_as_time_passes(self):
        start = la_time(4, 10)
        order = {None: 0, LastMinuteTier.WITHIN_24H: 1, LastMinuteTier.SAME_DAY: 2}
        seen = []
        now = la_time(3, 8)
        while now < start:
            tier, _ = resolve_tier(start, now, LOS_ANGELES)
            seen.append(order[tier])
            now += timedelta(minutes=30)
        assert seen == sorted(seen)
        assert seen[0] == 0 and seen[-1] == 2


class TestRejections:
    def test_disabled_policy(self):
        result = classify(LastMinutePolicy(), la_time(3, 18), NOW, LOS_ANGELES)
        assert result.reason is IneligibleReason.DISABLED

    def test_disabled_weekday_uses_local_weekday(self):
        policy = _policy(disabled_weekdays=frozenset({"mon"}))
        assert classify(policy, la_time(3, 18), NOW, LOS_ANGELES).reason is (
            IneligibleReason.WEEKDAY_DISABLED
        )
        assert classify(policy, la_time(4, 10), NOW, LOS_ANGELES).eligible

    def test_block_containing_start(self):
        block = TimeInterval(la_time(3, 17), la_time(3, 19))
        result = classify(_policy(blocks=(block,)), la_time(3, 18), NOW, LOS_ANGELES)
        assert result.reason is IneligibleReason.BLOCKED

    def test_block_overlapping_the_appointment_end(self):
        block = TimeInterval(la_time(3, 18, 30), la_time(3, 19))
        policy = _policy(blocks=(block,))
        assert classify(policy, la_time(3, 18), NOW, LOS_ANGELES).eligible
        result = classify(policy, la_time(3, 18), NOW, LOS_ANGELES, end=la_time(3, 18, 45))
        assert result.reason is IneligibleReason.BLOCKED

    def test_block_ending_at_start_does_not_block(self):
        block = TimeInterval(la_time(3, 17), la_time(3, 18))
        assert classify(_policy(blocks=(block,)), la_time(3, 18), NOW, LOS_ANGELES).eligible

    def test_service_rule_disabled(self):
        policy = _policy(service_rules={"svc": ServiceRule(enabled=False)})
        result = classify(policy, la_time(3, 18), NOW, LOS_ANGELES, service_id="svc")
        assert result.reason is IneligibleReason.SERVICE_DISABLED
        assert classify(policy, la_time(3, 18), NOW, LOS_ANGELES, service_id="other").eligible


class TestPricing:
    def test_discounted_price(self):
        result = classify(_policy(), la_time(3, 18), NOW, LOS_ANGELES, base_price_cents=8000)
        assert result.discounted_price_cents == 6400

    def test_discount_below_global_floor_rejects_the_slot(self):
        policy = _policy(min_price_cents=7000)
        result = classify(policy, la_time(3, 18), NOW, LOS_ANGELES, base_price_cents=8000)
        assert not result.eligible
        assert result.reason is IneligibleReason.BELOW_PRICE_FLOOR
        assert result.tier is LastMinuteTier.SAME_DAY

    def test_service_floor_overrides_lower_global_floor(self):
        policy = _policy(
            min_price_cents=5000,
            service_rules={"svc": ServiceRule(enabled=True, min_price_cents=6500)},
        )
        result = classify(
            policy, la_time(3, 18), NOW, LOS_ANGELES, service_id="svc", base_price_cents=8000
        )
        assert result.reason is IneligibleReason.BELOW_PRICE_FLOOR

        # The 10% tier lands at 72.00, above the floor.
        result = classify(
            policy, la_time(4, 10), NOW, LOS_ANGELES, service_id="svc", base_price_cents=8000
        )
        assert result.eligible
        assert result.discounted_price_cents == 7200

    def test_price_exactly_at_floor_is_eligible(self):
        policy = _policy(min_price_cents=6400)
        result = classify(policy, la_time(3, 18), NOW, LOS_ANGELES, base_price_cents=8000)
        assert result.eligible

    def test_discounts_disabled_keeps_the_tier_but_not_the_discount(self):
        policy = _policy(discounts_enabled=False)
        result = classify(policy, la_time(3, 18), NOW, LOS_ANGELES, base_price_cents=8000)
        assert result.tier is LastMinuteTier.SAME_DAY
        assert result.discount_pct == 0
        assert result.discounted_price_cents == 8000

    def test_stored_percentages_are_clamped(self):
        policy = _policy(same_day_pct=90)
        result = classify(policy, la_time(3, 18), NOW, LOS_ANGELES, base_price_cents=8000)
        assert result.discount_pct == 50
        assert result.discounted_price_cents == 4000


@pytest.mark.parametrize(
    "raw,expected", [(75, 50), (-5, 0), (12.6, 13), ("20", 20), ("abc", 0), (None, 0)]
)
def test_clamp_pct(raw, expected):
    assert clamp_pct(raw) == expected
