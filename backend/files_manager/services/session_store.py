"""Session token resolution backed by Redis."""
import logging
from typing import Optional, Protocol

import redis.asyncio as redis

from files_manager.exceptions import MalformedIdError
from files_manager.types import OwnerId, parse_owner_id

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    async def resolve(self, token: str) -> Optional[OwnerId]:
        ...


class RedisSessionStore:
    """Reads `<prefix><token>` keys written by the login flow."""

    def __init__(self, redis_url: str = "redis://localhost:6379/0", key_prefix: str = "auth_"):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self._redis: Optional[redis.Redis] = None

    async def connect(self) -> None:
        self._redis = redis.from_url(self.redis_url, decode_responses=True)
        logger.info("Connected to Redis for sessions")

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

    def _ensure_connected(self) -> redis.Redis:
        if not self._redis:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._redis

    async def resolve(self, token: str) -> Optional[OwnerId]:
        value = await self._ensure_connected().get(f"{self.key_prefix}{token}")
        if value is None:
            return None
        try:
            return parse_owner_id(value)
        except MalformedIdError:
            logger.warning(f"Session {token[:8]}... holds a malformed user id")
            return None

    async def is_alive(self) -> bool:
        try:
            return bool(await self._ensure_connected().ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
