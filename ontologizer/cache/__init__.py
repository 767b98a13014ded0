"""Key-value cache store and page-result cache.

Use explicit imports:
    from ontologizer.cache.store import KeyValueStore, RedisStore, MemoryStore
    from ontologizer.cache.store import ResultCache, cache_summary
"""
