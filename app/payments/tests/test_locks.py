"""
Tests for the Redis distributed lock.

Redis is mocked; only the calls DistributedLock makes are checked.
"""

import pytest

from payments.exceptions import LockAcquisitionError
from payments.locks import DistributedLock


class TestDistributedLock:
    def test_acquire_success(self, mock_redis):
        lock = DistributedLock("test:key", ttl=30, blocking=False)

        assert lock.acquire() is True
        assert lock.is_held is True
        args, kwargs = mock_redis.set.call_args
        assert args[0] == "lock:test:key"
        assert kwargs == {"nx": True, "ex": 30}

    def test_each_acquisition_has_its_own_token(self, mock_redis):
        first = DistributedLock("a", blocking=False)
        second = DistributedLock("b", blocking=False)

        first.acquire()
        second.acquire()

        assert first._token != second._token

    def test_non_blocking_raises_when_held(self, mock_redis):
        mock_redis.set.return_value = False
        lock = DistributedLock("test:key", blocking=False)

        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert "already held" in exc_info.value.message
        assert exc_info.value.details["key"] == "lock:test:key"
        assert lock.is_held is False
        assert mock_redis.set.call_count == 1

    def test_blocking_retries_until_free(self, mock_redis, mocker):
        mocker.patch("payments.locks.time.sleep")
        mock_redis.set.side_effect = [False, False, True]
        lock = DistributedLock("test:key", blocking=True, timeout=1.0)

        assert lock.acquire() is True
        assert mock_redis.set.call_count == 3

    def test_blocking_times_out(self, mock_redis):
        mock_redis.set.return_value = False
        lock = DistributedLock("test:key", blocking=True, timeout=0.1)

        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert "within 0.1s" in exc_info.value.message
        assert exc_info.value.details["timeout"] == 0.1

    def test_release_runs_ownership_script(self, mock_redis):
        lock = DistributedLock("test:key", blocking=False)
        lock.acquire()
        token = lock._token

        assert lock.release() is True
        assert lock.is_held is False
        mock_redis.eval.assert_called_once_with(
            DistributedLock.RELEASE_SCRIPT, 1, "lock:test:key", token
        )

    def test_release_after_expiry_returns_false(self, mock_redis):
        mock_redis.eval.return_value = 0
        lock = DistributedLock("test:key", blocking=False)
        lock.acquire()

        assert lock.release() is False

    def test_release_without_acquire(self, mock_redis):
        lock = DistributedLock("test:key")

        assert lock.release() is False
        mock_redis.eval.assert_not_called()

    def test_extend_defaults_to_original_ttl(self, mock_redis):
        lock = DistributedLock("test:key", ttl=60, blocking=False)
        lock.acquire()

        assert lock.extend() is True
        args = mock_redis.eval.call_args[0]
        assert args[0] == DistributedLock.EXTEND_SCRIPT
        assert args[-1] == 60

    def test_extend_without_lock(self, mock_redis):
        assert DistributedLock("test:key").extend(ttl=10) is False

    def test_context_manager_releases_on_error(self, mock_redis):
        with pytest.raises(RuntimeError):
            with DistributedLock("test:key", blocking=False) as lock:
                assert lock.is_held
                raise RuntimeError("boom")

        assert lock.is_held is False
        mock_redis.eval.assert_called_once()
