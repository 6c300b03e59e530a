"""
Unit tests for the 15-minute duration grid.

Coverage:
1) Snapping, including halves and garbage input
2) Clamping to [15, 720] and buffers to [0, 180]
3) Choosing between an explicit total and the per-service sum
"""

from decimal import Decimal

import pytest

from app.domain.duration_grid import (
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    is_valid_duration,
    normalize_buffer,
    normalize_duration,
    resolve_total_duration,
    snap_to_grid,
)


class TestSnapToGrid:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (0, 0),
            (7, 0),
            (7.5, 15),
            (8, 15),
            (22, 15),
            (22.5, 30),
            (45, 45),
            (53, 60),
            ("30", 30),
        ],
    )
    def test_rounds_to_nearest_quarter_hour(self, raw, expected):
        assert snap_to_grid(raw) == expected

    @pytest.mark.parametrize("raw", [None, "abc", float("nan"), float("inf"), object()])
    def test_unusable_input_snaps_to_zero(self, raw):
        assert snap_to_grid(raw) == 0

    def test_negative_values_floor_at_zero(self):
        assert snap_to_grid(-10) == 0
        assert snap_to_grid(-60) == 0

    def test_snap_is_idempotent(self):
        for minutes in range(0, 800, 7):
            once = snap_to_grid(minutes)
            assert snap_to_grid(once) == once
            assert once % 15 == 0


class TestNormalization:
    def test_duration_is_clamped(self):
        assert normalize_duration(0) == MIN_DURATION_MINUTES
        assert normalize_duration(None) == MIN_DURATION_MINUTES
        assert normalize_duration(10_000) == MAX_DURATION_MINUTES
        assert normalize_duration(50) == 45

    def test_every_normalized_duration_is_on_grid_and_in_range(self):
        for minutes in range(-30, 900, 11):
            value = normalize_duration(minutes)
            assert value % 15 == 0
            assert MIN_DURATION_MINUTES <= value <= MAX_DURATION_MINUTES

    def test_buffer_allows_zero_and_caps_at_three_hours(self):
        assert normalize_buffer(None) == 0
        assert normalize_buffer(0) == 0
        assert normalize_buffer(14) == 15
        assert normalize_buffer(200) == 180


class TestValidDuration:
    @pytest.mark.parametrize("value", [15, 45, 45.0, 720])
    def test_on_grid_values_are_valid(self, value):
        assert is_valid_duration(value) is True

    @pytest.mark.parametrize("value", [None, 0, 50, 735, 45.5, True, "abc"])
    def test_off_grid_or_out_of_range_values_are_invalid(self, value):
        assert is_valid_duration(value) is False


class TestResolveTotalDuration:
    def test_explicit_grid_total_wins(self):
        assert resolve_total_duration(90, [45, 30]) == 90

    def test_off_grid_total_falls_back_to_item_sum(self):
        assert resolve_total_duration(50, [45, 30]) == 75

    def test_item_sum_is_snapped(self):
        assert resolve_total_duration(None, [20, 20]) == 45

    def test_item_sum_is_clamped(self):
        assert resolve_total_duration(None, 1000) == 720
        assert resolve_total_duration(None, []) == 15

    def test_decimal_items_are_accepted(self):
        assert resolve_total_duration(None, [Decimal("30"), 15]) == 45
