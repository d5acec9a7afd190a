"""Identity & ownership lookups consumed by the booking core"""

from .expiring_store import (
    ExpiringStore,
    InMemoryExpiringStore,
    OneTimeCodeStore,
    RedisExpiringStore,
    get_expiring_store,
    get_one_time_code_store,
)
from .repository import IdentityRepository

__all__ = [
    "ExpiringStore",
    "IdentityRepository",
    "InMemoryExpiringStore",
    "OneTimeCodeStore",
    "RedisExpiringStore",
    "get_expiring_store",
    "get_one_time_code_store",
]
