"""Response caching for the GovQuery client."""

from govquery.cache.backend import CacheEntry, TTLCache, default_cache
from govquery.cache.keys import build_key, health_key, query_key, schema_key, schemas_key

__all__ = [
    "CacheEntry",
    "TTLCache",
    "default_cache",
    "build_key",
    "health_key",
    "schemas_key",
    "schema_key",
    "query_key",
]
