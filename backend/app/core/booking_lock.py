"""
Per-professional scheduling mutex backed by Redis.

Every create/reschedule/resize for a professional runs its
check-then-write sequence while holding this lock. When the lock is
enabled but Redis cannot be reached, acquisition fails closed with
ScheduleLockUnavailableException; no scheduling write proceeds
unserialized.

Each holder gets an owner token. Release deletes the key only while it
still holds that token, so a holder whose TTL lapsed cannot drop a lock
that someone else has since taken.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
from typing import Iterator, Optional

from redis import Redis
import ulid

from app.core.config import settings
from app.core.exceptions import ScheduleLockUnavailableException
from app.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

# Token handed out while the lock is switched off in settings.
LOCK_DISABLED_TOKEN = "lock-disabled"

RELEASE_IF_OWNER_LUA = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def _lock_key(professional_id: str) -> str:
    return f"professional:{professional_id}:schedule:mutex"


def _namespaced_key(key: str) -> str:
    return f"{settings.booking_lock_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=1,
            )
            client.ping()
        except Exception as exc:
            logger.warning("schedule_lock_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def acquire_schedule_lock(professional_id: str, ttl_s: Optional[int] = None) -> Optional[str]:
    """
    Try to take the lock.

    Returns the owner token, or None when another holder owns the lock.

    Raises:
        ScheduleLockUnavailableException: Redis is unreachable or errored
    """
    if not settings.booking_lock_enabled:
        return LOCK_DISABLED_TOKEN
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_booking_lock("acquire", "redis_unavailable")
        logger.error(
            "schedule_lock_redis_unavailable",
            extra={"professional_id": professional_id},
        )
        raise ScheduleLockUnavailableException()
    token = str(ulid.ULID())
    try:
        acquired = bool(
            client.set(
                _namespaced_key(_lock_key(professional_id)),
                token,
                nx=True,
                ex=ttl_s or settings.booking_lock_ttl_seconds,
            )
        )
    except Exception as exc:
        prometheus_metrics.record_booking_lock("acquire", "error")
        logger.error(
            "schedule_lock_acquire_failed",
            extra={
                "professional_id": professional_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        raise ScheduleLockUnavailableException() from exc
    prometheus_metrics.record_booking_lock("acquire", "success" if acquired else "blocked")
    return token if acquired else None


def release_schedule_lock(professional_id: str, token: str) -> None:
    if not settings.booking_lock_enabled or token == LOCK_DISABLED_TOKEN:
        return
    client = _get_sync_redis()
    if client is None:
        prometheus_metrics.record_booking_lock("release", "redis_unavailable")
        return
    try:
        deleted = client.eval(
            RELEASE_IF_OWNER_LUA, 1, _namespaced_key(_lock_key(professional_id)), token
        )
        prometheus_metrics.record_booking_lock("release", "success" if deleted else "not_owner")
    except Exception as exc:
        prometheus_metrics.record_booking_lock("release", "error")
        logger.warning(
            "schedule_lock_release_failed",
            extra={
                "professional_id": professional_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def schedule_lock(professional_id: str, ttl_s: Optional[int] = None) -> Iterator[bool]:
    token = acquire_schedule_lock(professional_id, ttl_s=ttl_s)
    try:
        yield bool(token)
    finally:
        if token:
            release_schedule_lock(professional_id, token)
