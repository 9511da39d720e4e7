"""Tests for SweepLock."""

from unittest.mock import ANY

import pytest
import redis

from orders.exceptions import LockAcquisitionError
from orders.locks import SweepLock


class TestSweepLock:
    def test_acquire_sets_key_with_nx_and_ttl(self, mock_redis):
        lock = SweepLock("sweep", ttl=600)

        assert lock.acquire() is True
        assert lock.is_held

        mock_redis.set.assert_called_once_with("lock:sweep", ANY, nx=True, ex=600)
        assert mock_redis.set.call_args.args[1] == lock._token

    def test_tokens_are_unique(self, mock_redis):
        first = SweepLock("a")
        second = SweepLock("b")

        first.acquire()
        second.acquire()

        assert first._token != second._token

    def test_second_holder_is_rejected(self, mock_redis):
        mock_redis.set.return_value = None

        lock = SweepLock("sweep")
        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert exc_info.value.details == {"key": "lock:sweep"}
        assert not lock.is_held

    def test_release_is_atomic_compare_and_delete(self, mock_redis):
        lock = SweepLock("sweep")
        lock.acquire()
        token = lock._token

        assert lock.release() is True
        assert not lock.is_held

        mock_redis.eval.assert_called_once_with(
            SweepLock.RELEASE_SCRIPT, 1, "lock:sweep", token
        )
        mock_redis.get.assert_not_called()
        mock_redis.delete.assert_not_called()

    def test_does_not_delete_lock_taken_by_someone_else(self, mock_redis):
        # TTL expired and another run took over: the script finds a different token
        mock_redis.eval.return_value = 0
        lock = SweepLock("sweep")
        lock.acquire()

        assert lock.release() is False
        mock_redis.delete.assert_not_called()

    def test_release_without_acquire_is_noop(self, mock_redis):
        assert SweepLock("sweep").release() is False
        mock_redis.eval.assert_not_called()

    def test_release_twice(self, mock_redis):
        lock = SweepLock("sweep")
        lock.acquire()
        lock.release()

        assert lock.release() is False
        assert mock_redis.eval.call_count == 1

    def test_context_releases_on_error(self, mock_redis):
        with pytest.raises(RuntimeError):
            with SweepLock("sweep"):
                raise RuntimeError("boom")

        mock_redis.eval.assert_called_once()

    def test_redis_outage_is_not_reported_as_held(self, mock_redis):
        mock_redis.set.side_effect = redis.ConnectionError("redis down")

        with pytest.raises(redis.ConnectionError):
            SweepLock("sweep").acquire()
