"""
Per-event single-writer locks.

Registrations and cancellations for one event run while holding the lock
for that event, so the capacity check and the write are serialized across
callers. Different events use different keys and never contend.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import redis

from eventhub.core import config
from eventhub.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(config.get_redis_url(), decode_responses=True)


def lock_key(event_id: int) -> str:
    return f"event_lock:{event_id}"


class RedisEventLocker:
    """Distributed lock keyed by event, shared by every API worker."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        timeout: float = config.LOCK_TIMEOUT,
        blocking_timeout: float = config.LOCK_BLOCKING_TIMEOUT,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout

    @contextmanager
    def hold(self, event_id: int) -> Iterator[None]:
        lock = self._client.lock(
            lock_key(event_id), timeout=self._timeout, blocking_timeout=self._blocking_timeout
        )
        try:
            acquired = lock.acquire(blocking=True, blocking_timeout=self._blocking_timeout)
        except redis.exceptions.RedisError as exc:
            logger.warning("Lock backend error for event %s: %s", event_id, exc)
            raise StoreUnavailable() from exc
        if not acquired:
            logger.warning("Timed out waiting for lock on event %s", event_id)
            raise StoreUnavailable("Could not acquire lock, please try again.")

        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                # Expired while held; the work already committed or rolled back
                logger.warning("Lock for event %s expired before release", event_id)


class LocalEventLocker:
    """In-process keyed lock for single-process deployments and tests."""

    def __init__(self, *, blocking_timeout: float = config.LOCK_BLOCKING_TIMEOUT) -> None:
        self._blocking_timeout = blocking_timeout
        self._guard = threading.Lock()
        # event_id -> [lock, number of callers holding or waiting on it]
        self._locks: dict[int, list] = {}

    def _checkout(self, event_id: int) -> threading.Lock:
        with self._guard:
            entry = self._locks.setdefault(event_id, [threading.Lock(), 0])
            entry[1] += 1
            return entry[0]

    def _checkin(self, event_id: int) -> None:
        with self._guard:
            entry = self._locks[event_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[event_id]

    @contextmanager
    def hold(self, event_id: int) -> Iterator[None]:
        lock = self._checkout(event_id)
        try:
            if not lock.acquire(timeout=self._blocking_timeout):
                logger.warning("Timed out waiting for lock on event %s", event_id)
                raise StoreUnavailable("Could not acquire lock, please try again.")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(event_id)


def make_locker(backend: str | None = None):
    backend = (backend or config.LOCK_BACKEND).lower()
    if backend == "local":
        return LocalEventLocker()
    return RedisEventLocker(get_redis_client())
