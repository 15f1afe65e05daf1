"""Client-local persistent storage.

String-keyed storage scoped to one client (one browser profile on the site).
Drafts and rate-limit timestamps live here. A process-local dict backs it in
development and tests; Redis backs it when REDIS_URL is configured so every
worker sees the same client state.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from redis.asyncio import Redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from redis.exceptions import ConnectionError, TimeoutError

from app.config import get_settings

logger = logging.getLogger(__name__)


class ClientStorage(ABC):
    """Abstract string-keyed storage for one client."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        pass


class MemoryClientStorage(ClientStorage):
    """Dict-backed storage; lives as long as the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class RedisClientStorage(ClientStorage):
    """Redis-backed storage namespaced under ``{prefix}:{client_id}``.

    Redis errors propagate; callers decide whether a failed read or write
    matters for them.
    """

    def __init__(self, redis: Redis, client_id: str, prefix: str = "rarefind:client"):
        self._redis = redis
        self.namespace = f"{prefix}:{client_id}"

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get_item(self, key: str) -> Optional[str]:
        return await self._redis.get(self._key(key))

    async def set_item(self, key: str, value: str) -> None:
        await self._redis.set(self._key(key), value)

    async def remove_item(self, key: str) -> None:
        await self._redis.delete(self._key(key))


_redis: Optional[Redis] = None
_memory_storages: dict[str, MemoryClientStorage] = {}


def _get_redis(redis_url: str) -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(
            redis_url,
            decode_responses=True,
            retry=Retry(ExponentialBackoff(), retries=3),
            retry_on_error=[ConnectionError, TimeoutError],
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        logger.info("Redis client storage initialized")
    return _redis


def get_client_storage(client_id: str) -> ClientStorage:
    """Storage for one client: Redis when configured, else process memory."""
    settings = get_settings()
    if settings.redis_url:
        return RedisClientStorage(
            _get_redis(settings.redis_url),
            client_id,
            prefix=settings.client_storage_prefix,
        )
    storage = _memory_storages.get(client_id)
    if storage is None:
        storage = MemoryClientStorage()
        _memory_storages[client_id] = storage
    return storage


def reset_client_storages() -> None:
    """Forget every in-memory client (tests, process restarts)."""
    _memory_storages.clear()


async def cleanup_client_storage() -> None:
    """Close the Redis connection on shutdown."""
    global _redis
    if _redis:
        await _redis.close()
        _redis = None
