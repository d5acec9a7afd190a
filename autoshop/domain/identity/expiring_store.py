"""
Expiring key-value storage owned by the identity side.

Replaces ad hoc "value map + expiry map" pairs with one abstraction that has
explicit TTL semantics and an explicit eviction policy. Two backends:

- InMemoryExpiringStore: single process, bounded, evicts expired entries first
  and then the entry closest to its deadline.
- RedisExpiringStore: shared across workers, relies on Redis SETEX expiry.
"""

import logging
import os
import secrets
import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Callable, Optional

import redis

from ...config import OTP_STORE_MAX_ENTRIES, OTP_TTL_SECONDS, REDIS_URL

logger = logging.getLogger(__name__)


class ExpiringStore(ABC):
    """Interface for string key-value stores where every entry has a TTL"""

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def purge_expired(self) -> int:
        ...


class InMemoryExpiringStore(ExpiringStore):
    """Bounded in-process store with lazy expiry on read and purge on write"""

    def __init__(self, max_entries: int = OTP_STORE_MAX_ENTRIES, clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        # Format: {key: (value, deadline)}
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._purge_locked(now)
                if len(self._entries) >= self.max_entries:
                    self._evict_soonest_locked()
            self._entries[key] = (value, now + ttl)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if self._clock() >= deadline:
                del self._entries[key]
                return None
            return value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        expired = [k for k, (_, deadline) in self._entries.items() if now >= deadline]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"🧹 Purged {len(expired)} expired entries")
        return len(expired)

    def _evict_soonest_locked(self) -> None:
        victim = min(self._entries, key=lambda k: self._entries[k][1])
        del self._entries[victim]
        logger.warning(f"⚠️ Expiring store full ({self.max_entries}), evicted entry closest to expiry")


_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client"""
    global _redis_client

    if _redis_client is None:
        if REDIS_URL:
            _redis_client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        else:
            _redis_client = redis.Redis(
                host=os.getenv("REDIS_HOST", "localhost"),
                port=int(os.getenv("REDIS_PORT", "6379")),
                password=os.getenv("REDIS_PASSWORD", None),
                db=int(os.getenv("REDIS_DB", "0")),
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
            )
        logger.info("Redis client initialised for expiring store")

    return _redis_client


class RedisExpiringStore(ExpiringStore):
    """Redis backed store; expiry and eviction are delegated to Redis"""

    def __init__(self, client: Optional[redis.Redis] = None, prefix: str = "expiring:"):
        self._client = client
        self.prefix = prefix

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = get_redis_client()
        return self._client

    def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.client.setex(f"{self.prefix}{key}", ttl, value)

    def get(self, key: str) -> Optional[str]:
        return self.client.get(f"{self.prefix}{key}")

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(f"{self.prefix}{key}"))

    def purge_expired(self) -> int:
        # Redis expires keys itself
        return 0


class OneTimeCodeStore:
    """Six digit one-time codes keyed by email, backed by an ExpiringStore"""

    def __init__(self, store: ExpiringStore, ttl: int = OTP_TTL_SECONDS):
        self.store = store
        self.ttl = ttl

    @staticmethod
    def _key(email: str) -> str:
        return f"otp:{email.strip().lower()}"

    def issue(self, email: str) -> str:
        code = f"{secrets.randbelow(1_000_000):06d}"
        self.store.set(self._key(email), code, self.ttl)
        logger.info(f"🔑 One-time code issued for {email}")
        return code

    def verify(self, email: str, code: str) -> bool:
        stored = self.store.get(self._key(email))
        if stored is None:
            return False
        return secrets.compare_digest(stored, code)

    def consume(self, email: str) -> None:
        self.store.delete(self._key(email))


def get_expiring_store() -> ExpiringStore:
    """Redis when REDIS_URL is configured, otherwise a bounded in-process store"""
    if REDIS_URL:
        logger.info("Using Redis expiring store")
        return RedisExpiringStore()
    logger.info(f"Using in-memory expiring store (max {OTP_STORE_MAX_ENTRIES} entries)")
    return InMemoryExpiringStore()


def get_one_time_code_store() -> OneTimeCodeStore:
    return OneTimeCodeStore(get_expiring_store())
