"""Shared helpers for backend test suites."""

from .fake_redis import FakeLockRedis
from .salon_seed import LOS_ANGELES, MONDAY, add_offering, la_time, seed_booking

__all__ = [
    "FakeLockRedis",
    "LOS_ANGELES",
    "MONDAY",
    "add_offering",
    "la_time",
    "seed_booking",
]
