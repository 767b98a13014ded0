"""Key-value cache store backends and the page-result cache."""

from __future__ import annotations

import hashlib
import json
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

import structlog
from redis.asyncio import ConnectionPool, Redis

logger = structlog.get_logger(__name__)

PAGE_KEY_PREFIX = "ontologizer_page_"

# Default page-result TTL: 1 hour
DEFAULT_PAGE_TTL_SECONDS = 3600
DEFAULT_REDIS_URL = "redis://localhost:6379/0"


@lru_cache
def redis_pool(url: str) -> ConnectionPool:
    """Shared connection pool per Redis URL."""
    return ConnectionPool.from_url(url, decode_responses=True, max_connections=10)


def md5_key(prefix: str, value: str) -> str:
    """Build a cache key from a prefix and the md5 of a value."""
    return prefix + hashlib.md5(value.encode("utf-8")).hexdigest()


class KeyValueStore(ABC):
    """JSON document store with per-key TTL."""

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        """Return the stored document or None on miss."""
        ...

    @abstractmethod
    async def set(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        """Upsert a document with a TTL in seconds."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if something was deleted."""
        ...

    @abstractmethod
    async def list(self, prefix: str) -> list[str]:
        """List live keys starting with prefix."""
        ...

    @abstractmethod
    async def size(self, key: str) -> int:
        """Serialized size of a stored document in bytes (0 if absent)."""
        ...


class RedisStore(KeyValueStore):
    """
    Redis-backed store.

    Errors are logged and reported as misses so a cache outage never
    fails an analysis.
    """

    def __init__(self, redis: Redis | None = None, url: str = DEFAULT_REDIS_URL):
        self._redis = redis
        self.url = url

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = Redis(connection_pool=redis_pool(self.url))
        return self._redis

    async def get(self, key: str) -> dict[str, Any] | None:
        try:
            data = await self.redis.get(key)
            if not data:
                return None
            return json.loads(data)
        except Exception as e:
            logger.warning("cache_get_error", key=key, error=str(e))
            return None

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        try:
            await self.redis.setex(key, ttl, json.dumps(value))
            return True
        except Exception as e:
            logger.warning("cache_set_error", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.redis.delete(key))
        except Exception as e:
            logger.warning("cache_delete_error", key=key, error=str(e))
            return False

    async def list(self, prefix: str) -> list[str]:
        try:
            return sorted([key async for key in self.redis.scan_iter(match=f"{prefix}*")])
        except Exception as e:
            logger.warning("cache_list_error", prefix=prefix, error=str(e))
            return []

    async def size(self, key: str) -> int:
        try:
            return int(await self.redis.strlen(key))
        except Exception as e:
            logger.warning("cache_size_error", key=key, error=str(e))
            return 0


class MemoryStore(KeyValueStore):
    """In-process store with monotonic-clock expiry."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[float, str]] = {}

    def _live(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= time.monotonic():
            del self._data[key]
            return None
        return payload

    async def get(self, key: str) -> dict[str, Any] | None:
        payload = self._live(key)
        return json.loads(payload) if payload is not None else None

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> bool:
        self._data[key] = (time.monotonic() + ttl, json.dumps(value))
        return True

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def list(self, prefix: str) -> list[str]:
        return sorted(k for k in list(self._data) if k.startswith(prefix) and self._live(k))

    async def size(self, key: str) -> int:
        payload = self._live(key)
        return len(payload.encode("utf-8")) if payload is not None else 0


def cache_summary(result: dict[str, Any]) -> dict[str, Any]:
    """Summarize a cached page result for admin listings."""
    entities = result.get("entities") or []
    return {
        "url": result.get("url", ""),
        "primary_topic": result.get("primary_topic", ""),
        "main_topic_confidence": entities[0].get("confidence_score", 0) if entities else 0,
        "topical_salience": result.get("topical_salience", 0),
        "timestamp": result.get("timestamp", ""),
    }


class ResultCache:
    """
    Cache for complete page analysis results.

    Entries are keyed by the md5 of the source URL and expire after
    a fixed TTL, after which the page is analyzed again.
    """

    def __init__(self, store: KeyValueStore, ttl_seconds: int = DEFAULT_PAGE_TTL_SECONDS):
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def cache_key(url: str) -> str:
        """Generate the cache key for a URL."""
        return md5_key(PAGE_KEY_PREFIX, url)

    async def get(self, url: str) -> dict[str, Any] | None:
        result = await self.store.get(self.cache_key(url))
        if result is None:
            logger.debug("page_cache_miss", url=url)
            return None
        logger.info("page_cache_hit", url=url)
        return result

    async def set(self, url: str, result: dict[str, Any]) -> bool:
        stored = await self.store.set(self.cache_key(url), result, self.ttl_seconds)
        if stored:
            logger.info("page_cache_set", url=url, ttl_seconds=self.ttl_seconds)
        return stored

    async def invalidate(self, url: str) -> bool:
        deleted = await self.store.delete(self.cache_key(url))
        logger.info("page_cache_invalidated", url=url, deleted=deleted)
        return deleted

    async def list_entries(self) -> list[dict[str, Any]]:
        """Summaries of every cached result, each with its cache_key."""
        entries = []
        for key in await self.store.list(PAGE_KEY_PREFIX):
            result = await self.store.get(key)
            if result is None:
                continue
            summary = cache_summary(result)
            summary["cache_key"] = key
            entries.append(summary)
        return entries

    async def delete_key(self, key: str) -> bool:
        """Delete a cached result by its raw cache key."""
        if not key.startswith(PAGE_KEY_PREFIX):
            return False
        return await self.store.delete(key)

    async def clear(self) -> int:
        """Drop every cached page result and return how many were removed."""
        cleared = 0
        for key in await self.store.list(PAGE_KEY_PREFIX):
            if await self.store.delete(key):
                cleared += 1
        logger.info("page_cache_cleared", count=cleared)
        return cleared
