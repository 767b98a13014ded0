"""Cross-request cache of high-quality enrichment results."""

from typing import Any

import structlog

from ontologizer.cache.store import KeyValueStore, md5_key
from ontologizer.enrichment.models import EnrichedEntity

logger = structlog.get_logger(__name__)

ENTITY_KEY_PREFIX = "ontologizer_entity_"

# One week
DEFAULT_ENTITY_TTL_SECONDS = 7 * 24 * 3600

MIN_CACHED_SOURCES = 2
MIN_CACHED_CONFIDENCE = 80


class EntityCache:
    """
    Stores enriched entities keyed by their lowercased name.

    Only entities backed by at least two sources with a confidence of 80
    or more are written, so a cache hit is always a strong match.
    """

    def __init__(self, store: KeyValueStore, ttl_seconds: int = DEFAULT_ENTITY_TTL_SECONDS):
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def cache_key(name: str) -> str:
        return md5_key(ENTITY_KEY_PREFIX, name.lower())

    async def get(self, name: str) -> EnrichedEntity | None:
        data = await self.store.get(self.cache_key(name))
        if data is None:
            return None
        try:
            entity = EnrichedEntity.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("entity_cache_corrupt", entity=name, error=str(e))
            return None
        logger.debug("entity_cache_hit", entity=name)
        return entity

    @staticmethod
    def is_cacheable(entity: EnrichedEntity) -> bool:
        return (
            entity.source_count >= MIN_CACHED_SOURCES
            and entity.confidence_score >= MIN_CACHED_CONFIDENCE
        )

    async def put(self, entity: EnrichedEntity) -> bool:
        """Write the entity if it qualifies. Returns True when stored."""
        if not self.is_cacheable(entity):
            return False
        stored = await self.store.set(self.cache_key(entity.name), entity.to_dict(), self.ttl_seconds)
        if stored:
            logger.info(
                "entity_cached",
                entity=entity.name,
                sources=entity.source_count,
                confidence=entity.confidence_score,
            )
        return stored

    async def stats(self) -> dict[str, Any]:
        keys = await self.store.list(ENTITY_KEY_PREFIX)
        size = 0
        for key in keys:
            size += await self.store.size(key)
        return {"cached_entities": len(keys), "cache_size_bytes": size}

    async def clear(self) -> int:
        cleared = 0
        for key in await self.store.list(ENTITY_KEY_PREFIX):
            if await self.store.delete(key):
                cleared += 1
        logger.info("entity_cache_cleared", count=cleared)
        return cleared
