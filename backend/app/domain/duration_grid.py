"""Quantization of appointment lengths to the 15-minute calendar grid."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Union

GRID_MINUTES = 15
MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 12 * 60
MAX_BUFFER_MINUTES = 180

Number = Union[int, float]


def snap_to_grid(minutes: Optional[Number]) -> int:
    """Round to the nearest multiple of 15 (halves round up), floored at 0."""
    if minutes is None:
        return 0
    try:
        value = float(minutes)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value):
        return 0
    snapped = int(math.floor(value / GRID_MINUTES + 0.5)) * GRID_MINUTES
    return max(0, snapped)


def clamp(minutes: int, lo: int = MIN_DURATION_MINUTES, hi: int = MAX_DURATION_MINUTES) -> int:
    return max(lo, min(hi, int(minutes)))


def normalize_duration(minutes: Optional[Number]) -> int:
    return clamp(snap_to_grid(minutes))


def normalize_buffer(minutes: Optional[Number]) -> int:
    return clamp(snap_to_grid(minutes), 0, MAX_BUFFER_MINUTES)


def is_valid_duration(minutes: Optional[Number]) -> bool:
    """True when ``minutes`` is already an on-grid value inside [15, 720]."""
    if minutes is None or isinstance(minutes, bool):
        return False
    try:
        value = float(minutes)
    except (TypeError, ValueError):
        return False
    if not math.isfinite(value) or not value.is_integer():
        return False
    return normalize_duration(value) == int(value)


def resolve_total_duration(
    requested_minutes: Optional[Number], computed_from_items: Union[Number, Iterable[Number]]
) -> int:
    """
    Pick the booking length.

    An explicit total wins when it is already a valid grid value, so an
    interactive resize is not undone by stale per-service durations.
    Otherwise the per-item sum is snapped and clamped.
    """
    if is_valid_duration(requested_minutes):
        return int(requested_minutes)  # type: ignore[arg-type]

    if isinstance(computed_from_items, (int, float)):
        total: Number = computed_from_items
    else:
        total = sum(computed_from_items)
    return normalize_duration(total)
