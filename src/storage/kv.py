"""
Key-value store used for all durable signal-network state.

The contract is deliberately small: single-key ``get`` and ``put`` with an
optional expiry. There is no delete, no transaction and no query; every
index is a manually maintained key (see ``src.storage.index``).

Two implementations share the contract:
- RedisStore: JSON documents in Redis (production)
- MemoryStore: process-local dict (local development and tests)
"""

import json
import logging
import time
from typing import Any, Protocol

import redis.asyncio as redis

from src.config.settings import get_settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Single-key JSON store with optional expiry."""

    async def get(self, key: str) -> Any | None: ...

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None: ...

    async def health_check(self) -> bool: ...

    async def close(self) -> None: ...


class RedisStore:
    """
    Redis-backed JSON key-value store.

    Usage:
        store = RedisStore()
        await store.put("beat:bitcoin-macro", {...})
        beat = await store.get("beat:bitcoin-macro")
        await store.close()
    """

    def __init__(
        self,
        redis_url: str | None = None,
        client: redis.Redis | None = None,
    ):
        """
        Initialize the store.

        Args:
            redis_url: Redis connection URL (default from settings)
            client: Pre-built client, mainly for tests
        """
        if client is None:
            settings = get_settings()
            client = redis.from_url(
                redis_url or str(settings.redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
        self._redis = client

    async def get(self, key: str) -> Any | None:
        raw = await self._redis.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding non-JSON value at key %s", key)
            return None

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        payload = json.dumps(value, separators=(",", ":"))
        if ttl_seconds:
            await self._redis.set(key, payload, ex=ttl_seconds)
        else:
            await self._redis.set(key, payload)

    async def health_check(self) -> bool:
        """Ping Redis; False when unreachable."""
        try:
            return bool(await self._redis.ping())
        except Exception as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    async def close(self) -> None:
        await self._redis.aclose()


class MemoryStore:
    """
    In-process store with the same contract as RedisStore.

    Values are round-tripped through JSON so callers cannot share mutable
    state with the store, matching what a networked store would do.
    """

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._data[key]
            return None
        return json.loads(payload)

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds else None
        self._data[key] = (json.dumps(value), expires_at)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._data.clear()


def create_store(backend: str | None = None) -> KeyValueStore:
    """Build the store selected by ``STORE_BACKEND`` (redis or memory)."""
    backend = backend or get_settings().store_backend
    if backend == "memory":
        logger.info("Using in-memory key-value store")
        return MemoryStore()
    return RedisStore()
