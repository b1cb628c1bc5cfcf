"""
Redis-based distributed lock.

Serialises read-modify-write cycles on one parking location across API
workers: the booking service holds ``parking-location:<id>`` while it loads
the aggregate, applies a ledger command and commits.

Implementation uses SET NX EX for acquire (retried with a doubling delay)
and a Lua script for atomic check-and-delete on release.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class LockNotAcquired(RuntimeError):
    """Raised when the lock is still held by someone else after all retries."""


def location_lock_key(location_id) -> str:
    return f"parking-location:{location_id}"


class DistributedLock:
    def __init__(
        self,
        client: aioredis.Redis,
        key: str,
        ttl_seconds: int = 30,
        retries: int = 0,
        retry_delay: float = 0.05,
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.retries = retries
        self.retry_delay = retry_delay
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire, retrying up to ``retries`` times. True on success."""
        delay = self.retry_delay
        for attempt in range(self.retries + 1):
            if await self.redis.set(self.key, self.token, nx=True, ex=self.ttl):
                return True
            if attempt < self.retries:
                await asyncio.sleep(delay)
                delay *= 2
        logger.info("Lock %s busy after %d attempt(s)", self.key, self.retries + 1)
        return False

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)

    # context-manager support
    async def __aenter__(self):
        if not await self.acquire():
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()
