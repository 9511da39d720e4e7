"""
Mutual exclusion for reconciliation sweeps.

At most one run of each sweep executes at a time across all workers.
The lock is a Redis key set with NX and a TTL, so it spans processes and
hosts and frees itself if a worker dies mid-run.

The lock talks to Redis directly rather than through the Django cache:
the cache is configured with IGNORE_EXCEPTIONS, which would turn a Redis
outage into a silent "already held" on every run.

Usage:
    from orders.locks import SweepLock

    try:
        with SweepLock("orders:auto_release", ttl=600):
            run_sweep()
    except LockAcquisitionError:
        # Another worker is already sweeping
        ...
"""

from __future__ import annotations

import uuid as uuid_module
from typing import TYPE_CHECKING

from django_redis import get_redis_connection

from orders.exceptions import LockAcquisitionError

if TYPE_CHECKING:
    from typing import Any

    from redis import Redis


class SweepLock:
    """
    Non-blocking Redis lock with TTL and token ownership.

    Release runs an atomic compare-and-delete, so a run that outlived its
    TTL cannot free a lock taken by the next run.

    Args:
        key: Lock identifier (will be prefixed with "lock:")
        ttl: Lock TTL in seconds
    """

    # Lua script for atomic check-and-delete (release)
    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, key: str, ttl: int = 600) -> None:
        self.key = f"lock:{key}"
        self.ttl = ttl
        self._token: str | None = None
        self._redis: Redis | None = None

    def _get_redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis_connection("default")
        return self._redis

    def acquire(self) -> bool:
        """
        Take the lock or fail immediately.

        Raises:
            LockAcquisitionError: If another run holds the lock
        """
        token = str(uuid_module.uuid4())
        if not self._get_redis().set(self.key, token, nx=True, ex=self.ttl):
            raise LockAcquisitionError(
                f"Lock '{self.key}' is already held",
                details={"key": self.key},
            )
        self._token = token
        return True

    def release(self) -> bool:
        """Release the lock if we still own it. Safe to call twice."""
        if self._token is None:
            return False

        result = self._get_redis().eval(self.RELEASE_SCRIPT, 1, self.key, self._token)
        self._token = None
        return bool(result)

    @property
    def is_held(self) -> bool:
        return self._token is not None

    def __enter__(self) -> SweepLock:
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
