"""
Redis-based distributed lock for ledger-wide jobs.

Money movements serialize on database row locks (see LedgerService).
DistributedLock covers the work that spans every account, such as a full
reconciliation run, and must not run twice at once across Celery workers.

Usage:
    from payments.locks import DistributedLock

    with DistributedLock("reconciliation:run", ttl=3600, timeout=5.0) as lock:
        for batch in batches:
            reconcile(batch)
            lock.extend()
"""

from __future__ import annotations

import time
import uuid as uuid_module
from typing import TYPE_CHECKING

from django_redis import get_redis_connection

from payments.exceptions import LockAcquisitionError

if TYPE_CHECKING:
    from typing import Any

    from redis import Redis

# Delay between attempts while waiting for a held lock
RETRY_INTERVAL_SECONDS = 0.05


class DistributedLock:
    """
    Redis lock with a TTL and an ownership token.

    The key is written with SET NX EX, so a crashed holder's lock expires on
    its own. Release and extend run as Lua scripts that first compare the
    stored token with ours, so a holder whose TTL ran out can never release
    or extend the lock somebody else now holds.

    Args:
        key: Lock identifier (stored as "lock:<key>")
        ttl: Seconds until the lock expires on its own
        blocking: Wait for a held lock instead of failing at once
        timeout: Longest wait in seconds when blocking

    Raises:
        LockAcquisitionError: From acquire()/__enter__ when the lock is held
            by someone else (after the timeout, if blocking)
    """

    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    end
    return 0
    """

    EXTEND_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("expire", KEYS[1], ARGV[2])
    end
    return 0
    """

    def __init__(
        self,
        key: str,
        ttl: int = 30,
        blocking: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self.blocking = blocking
        self.timeout = timeout
        self._token: str | None = None
        self._redis: Redis | None = None

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis_connection("default")
        return self._redis

    @property
    def is_held(self) -> bool:
        """Whether this instance believes it holds the lock."""
        return self._token is not None

    def acquire(self) -> bool:
        """
        Take the lock.

        Returns:
            True once the lock is held

        Raises:
            LockAcquisitionError: If the lock could not be taken
        """
        token = str(uuid_module.uuid4())
        deadline = time.monotonic() + (self.timeout if self.blocking else 0)

        while True:
            if self.redis.set(self.key, token, nx=True, ex=self.ttl):
                self._token = token
                return True
            if time.monotonic() >= deadline:
                break
            time.sleep(RETRY_INTERVAL_SECONDS)

        if self.blocking:
            message = f"Failed to acquire lock '{self.key}' within {self.timeout}s"
        else:
            message = f"Lock '{self.key}' is already held"
        raise LockAcquisitionError(
            message,
            details={"key": self.key, "timeout": self.timeout},
        )

    def release(self) -> bool:
        """
        Give the lock back if we still own it.

        Returns:
            True if our key was deleted, False if we held nothing or the
            lock had already expired. Safe to call more than once.
        """
        if self._token is None:
            return False
        token, self._token = self._token, None
        return bool(self.redis.eval(self.RELEASE_SCRIPT, 1, self.key, token))

    def extend(self, ttl: int | None = None) -> bool:
        """
        Reset the TTL of a lock we own.

        Args:
            ttl: New TTL in seconds (defaults to the original TTL)

        Returns:
            True if the TTL was reset, False if we no longer own the lock
        """
        if self._token is None:
            return False
        return bool(
            self.redis.eval(
                self.EXTEND_SCRIPT, 1, self.key, self._token, ttl or self.ttl
            )
        )

    def __enter__(self) -> DistributedLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> bool:
        self.release()
        return False


__all__ = ["DistributedLock"]
