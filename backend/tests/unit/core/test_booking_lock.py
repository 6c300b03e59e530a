"""
Unit tests for booking_lock.py.

Coverage:
1) Key generation
2) Lock acquisition/release with owner tokens
3) TTL propagation
4) Failing closed when Redis is unavailable
5) Context manager behavior
"""

from unittest.mock import ANY, MagicMock, patch

import pytest

from app.core.booking_lock import (
    LOCK_DISABLED_TOKEN,
    RELEASE_IF_OWNER_LUA,
    _lock_key,
    _namespaced_key,
    acquire_schedule_lock,
    release_schedule_lock,
    schedule_lock,
)
from app.core.config import settings
from app.core.exceptions import ScheduleLockUnavailableException
from tests._utils import FakeLockRedis

PRO = "01KDGCP1R4N6AQKXNWV4PFY2HB"
KEY = _namespaced_key(_lock_key(PRO))


@pytest.fixture(autouse=True)
def _lock_enabled(monkeypatch):
    monkeypatch.setattr(settings, "booking_lock_enabled", True)


@pytest.fixture
def fake_redis():
    redis = FakeLockRedis()
    with patch("app.core.booking_lock._get_sync_redis", return_value=redis):
        yield redis


class TestKeyGeneration:
    def test_lock_key_format(self):
        assert _lock_key("ABC123") == "professional:ABC123:schedule:mutex"

    def test_namespaced_key_format(self):
        namespaced = _namespaced_key(_lock_key("ABC123"))
        prefix = settings.booking_lock_namespace
        assert namespaced == f"{prefix}:lock:professional:ABC123:schedule:mutex"


class TestLockAcquisition:
    def test_acquire_lock_success(self):
        mock_redis = MagicMock()
        mock_redis.set.return_value = True
        with patch("app.core.booking_lock._get_sync_redis", return_value=mock_redis):
            token = acquire_schedule_lock(PRO)
        assert token
        mock_redis.set.assert_called_once_with(
            KEY, token, nx=True, ex=settings.booking_lock_ttl_seconds
        )

    def test_acquire_lock_already_held(self):
        mock_redis = MagicMock()
        mock_redis.set.return_value = False
        with patch("app.core.booking_lock._get_sync_redis", return_value=mock_redis):
            assert acquire_schedule_lock(PRO, ttl_s=120) is None
        mock_redis.set.assert_called_once_with(KEY, ANY, nx=True, ex=120)

    def test_each_holder_gets_its_own_token(self, fake_redis):
        first = acquire_schedule_lock(PRO)
        release_schedule_lock(PRO, first)
        second = acquire_schedule_lock(PRO)
        assert first != second

    def test_disabled_lock_never_touches_redis(self, monkeypatch):
        monkeypatch.setattr(settings, "booking_lock_enabled", False)
        with patch("app.core.booking_lock._get_sync_redis") as mock_get:
            token = acquire_schedule_lock(PRO)
            assert token == LOCK_DISABLED_TOKEN
            release_schedule_lock(PRO, token)
        mock_get.assert_not_called()


class TestOwnerRelease:
    def test_release_deletes_own_lock(self, fake_redis):
        token = acquire_schedule_lock(PRO)
        release_schedule_lock(PRO, token)
        assert KEY not in fake_redis.store

    def test_expired_holder_cannot_release_the_next_holder(self, fake_redis):
        stale = acquire_schedule_lock(PRO)
        # TTL lapses and another request takes the lock.
        del fake_redis.store[KEY]
        current = acquire_schedule_lock(PRO)

        release_schedule_lock(PRO, stale)

        assert fake_redis.store[KEY] == current
        assert acquire_schedule_lock(PRO) is None

    def test_release_uses_compare_and_delete(self):
        mock_redis = MagicMock()
        with patch("app.core.booking_lock._get_sync_redis", return_value=mock_redis):
            release_schedule_lock(PRO, "token-1")
        mock_redis.eval.assert_called_once_with(RELEASE_IF_OWNER_LUA, 1, KEY, "token-1")
        mock_redis.delete.assert_not_called()


class TestFailClosed:
    def test_redis_unavailable_refuses_the_lock(self):
        with patch("app.core.booking_lock._get_sync_redis", return_value=None):
            with pytest.raises(ScheduleLockUnavailableException) as exc_info:
                acquire_schedule_lock(PRO)
        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "SCHEDULE_LOCK_UNAVAILABLE"

    def test_redis_error_on_set_refuses_the_lock(self):
        mock_redis = MagicMock()
        mock_redis.set.side_effect = ConnectionError("reset")
        with patch("app.core.booking_lock._get_sync_redis", return_value=mock_redis):
            with pytest.raises(ScheduleLockUnavailableException):
                acquire_schedule_lock(PRO)

    def test_context_manager_body_never_runs_without_redis(self):
        ran = []
        with patch("app.core.booking_lock._get_sync_redis", return_value=None):
            with pytest.raises(ScheduleLockUnavailableException):
                with schedule_lock(PRO):
                    ran.append(True)
        assert ran == []

    def test_release_error_is_swallowed(self):
        mock_redis = MagicMock()
        mock_redis.eval.side_effect = ConnectionError("reset")
        with patch("app.core.booking_lock._get_sync_redis", return_value=mock_redis):
            release_schedule_lock(PRO, "token-1")
        mock_redis.eval.assert_called_once()


class TestContextManager:
    def test_yields_acquisition_status_and_releases(self, fake_redis):
        with schedule_lock(PRO) as acquired:
            assert acquired is True
            assert KEY in fake_redis.store
        assert KEY not in fake_redis.store

    def test_released_on_exception(self, fake_redis):
        with pytest.raises(ValueError):
            with schedule_lock(PRO):
                raise ValueError("boom")
        assert KEY not in fake_redis.store

    def test_no_release_if_not_acquired(self):
        mock_redis = MagicMock()
        mock_redis.set.return_value = False
        with patch("app.core.booking_lock._get_sync_redis", return_value=mock_redis):
            with schedule_lock(PRO) as acquired:
                assert acquired is False
        mock_redis.eval.assert_not_called()
