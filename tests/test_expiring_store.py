"""Expiring key-value store and one-time codes."""
import pytest

from autoshop.domain.identity import expiring_store
from autoshop.domain.identity.expiring_store import (
    ExpiringStore,
    InMemoryExpiringStore,
    OneTimeCodeStore,
    RedisExpiringStore,
    get_expiring_store,
    get_one_time_code_store,
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingRedis:
    """Minimal stand-in for the three Redis commands the store issues."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    def get(self, key):
        return self.data.get(key)

    def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryExpiringStore(max_entries=3, clock=clock)


def test_value_available_until_deadline(store, clock):
    store.set("a", "1", ttl=60)
    clock.advance(59)
    assert store.get("a") == "1"
    clock.advance(1)
    assert store.get("a") is None
    assert len(store) == 0


def test_set_overwrites_and_extends(store, clock):
    store.set("a", "1", ttl=10)
    clock.advance(5)
    store.set("a", "2", ttl=10)
    clock.advance(8)
    assert store.get("a") == "2"


def test_delete(store):
    store.set("a", "1", ttl=10)
    assert store.delete("a") is True
    assert store.delete("a") is False
    assert store.get("a") is None


def test_purge_expired(store, clock):
    store.set("a", "1", ttl=5)
    store.set("b", "2", ttl=50)
    clock.advance(10)
    assert store.purge_expired() == 1
    assert len(store) == 1


def test_full_store_drops_expired_entries_first(store, clock):
    store.set("a", "1", ttl=5)
    store.set("b", "2", ttl=100)
    store.set("c", "3", ttl=200)
    clock.advance(10)
    store.set("d", "4", ttl=10)
    assert store.get("b") == "2"
    assert store.get("c") == "3"
    assert store.get("d") == "4"


def test_full_store_evicts_entry_closest_to_expiry(store):
    store.set("a", "1", ttl=300)
    store.set("b", "2", ttl=100)
    store.set("c", "3", ttl=200)
    store.set("d", "4", ttl=400)
    assert store.get("b") is None
    assert {k for k in "acd" if store.get(k)} == {"a", "c", "d"}


def test_invalid_ttl(store):
    with pytest.raises(ValueError):
        store.set("a", "1", ttl=0)


def test_redis_store_uses_setex_with_prefix():
    client = RecordingRedis()
    store = RedisExpiringStore(client=client, prefix="t:")
    store.set("k", "v", ttl=30)
    assert client.ttls == {"t:k": 30}
    assert store.get("k") == "v"
    assert store.delete("k") is True
    assert store.get("k") is None


def test_one_time_code_lifecycle(store, clock):
    codes = OneTimeCodeStore(store, ttl=300)
    code = codes.issue("User@Test.com")

    assert len(code) == 6 and code.isdigit()
    assert codes.verify("user@test.com", code)
    assert not codes.verify("user@test.com", "not-it")

    clock.advance(301)
    assert not codes.verify("user@test.com", code)


def test_one_time_code_consumed(store):
    codes = OneTimeCodeStore(store, ttl=300)
    code = codes.issue("user@test.com")
    codes.consume("user@test.com")
    assert not codes.verify("user@test.com", code)


def test_backend_missing_a_method_cannot_be_created():
    class Incomplete(ExpiringStore):
        def set(self, key, value, ttl):
            pass

        def get(self, key):
            return None

    with pytest.raises(TypeError):
        Incomplete()


def test_factory_uses_memory_without_redis_url(monkeypatch):
    monkeypatch.setattr(expiring_store, "REDIS_URL", None)
    assert isinstance(get_expiring_store(), InMemoryExpiringStore)


def test_factory_uses_redis_when_configured(monkeypatch):
    monkeypatch.setattr(expiring_store, "REDIS_URL", "redis://localhost:6379/0")
    assert isinstance(get_expiring_store(), RedisExpiringStore)


def test_code_store_factory_wraps_configured_backend(monkeypatch):
    monkeypatch.setattr(expiring_store, "REDIS_URL", None)
    codes = get_one_time_code_store()
    assert isinstance(codes.store, InMemoryExpiringStore)
    code = codes.issue("user@test.com")
    assert codes.verify("user@test.com", code)
