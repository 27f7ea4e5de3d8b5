"""Tests for the Redis-backed session store."""
import uuid

import pytest

from files_manager.services.session_store import RedisSessionStore


class FakeRedis:
    def __init__(self, values=None):
        self.values = dict(values or {})
        self.keys_read = []

    async def get(self, key):
        self.keys_read.append(key)
        return self.values.get(key)

    async def ping(self):
        return True


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def fake_redis(user_id):
    return FakeRedis({"auth_good": str(user_id), "auth_bad": "not-an-id"})


@pytest.fixture
def store(fake_redis):
    store = RedisSessionStore()
    store._redis = fake_redis
    return store


async def test_resolve_known_token(store, fake_redis, user_id):
    assert await store.resolve("good") == user_id
    assert fake_redis.keys_read == ["auth_good"]


async def test_resolve_unknown_token(store):
    assert await store.resolve("missing") is None


async def test_resolve_malformed_stored_id(store):
    assert await store.resolve("bad") is None


async def test_custom_key_prefix(fake_redis, user_id):
    fake_redis.values["session:good"] = str(user_id)
    store = RedisSessionStore(key_prefix="session:")
    store._redis = fake_redis

    assert await store.resolve("good") == user_id


async def test_resolve_requires_connect():
    with pytest.raises(RuntimeError):
        await RedisSessionStore().resolve("good")


async def test_is_alive(store):
    assert await store.is_alive() is True
    assert await RedisSessionStore().is_alive() is False
