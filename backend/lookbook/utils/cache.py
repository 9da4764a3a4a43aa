"""
Completion cache for the lookbook backend.
A bounded in-memory TTL cache that the caller creates and passes into the pipeline.
"""
import json
import hashlib
import logging
from typing import Any, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)


def generate_cache_key(prefix: str, *args, **kwargs) -> str:
    """Generate a cache key from prefix and arguments."""
    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True, default=str)
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


class CompletionCache:
    """key -> parsed completion result, bounded by size and age.

    Entries past maxsize are evicted least-recently-used; entries older than ttl
    seconds expire. invalidate() and clear() evict explicitly.
    """

    def __init__(self, maxsize: int = 64, ttl: int = 300):
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)

    @property
    def maxsize(self) -> int:
        return int(self._cache.maxsize)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache

    def get(self, key: str) -> Optional[Any]:
        result = self._cache.get(key)
        if result is None:
            logger.debug(f"Cache MISS for key: {key[:50]}...")
        else:
            logger.debug(f"Cache HIT for key: {key[:50]}...")
        return result

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value
        logger.debug(f"Cache SET for key: {key[:50]}... ({len(self._cache)}/{self.maxsize})")

    def invalidate(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        self._cache.clear()
        logger.info("Completion cache cleared")
