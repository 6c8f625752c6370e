"""
Process-scoped TTL cache for resolved Slack identities.

Wraps cachetools.TTLCache so that negative results ("not found") can be cached
alongside hits. One instance is created at startup and handed to the
name resolver; tests build their own with a fake timer.
"""

import time

from cachetools import TTLCache

from config import IDENTITY_CACHE_MAX_SIZE, IDENTITY_CACHE_TTL_SECONDS, get_logger

logger = get_logger("cache")

# Sentinel object to distinguish "not in cache" from cached None values
MISSING = object()


class IdentityCache:
    """TTL cache keyed by normalised (first, last) name pairs."""

    def __init__(
        self,
        ttl=IDENTITY_CACHE_TTL_SECONDS,
        maxsize=IDENTITY_CACHE_MAX_SIZE,
        timer=time.monotonic,
    ):
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    @staticmethod
    def make_key(first_name, last_name):
        return f"{first_name.strip().lower()}-{last_name.strip().lower()}"

    def get(self, key):
        """Return the cached member dict, None for a cached miss, or MISSING."""
        return self._cache.get(key, MISSING)

    def set(self, key, member):
        self._cache[key] = member

    def clear(self):
        self._cache.clear()
        logger.info("CACHE: Identity cache cleared")

    def __len__(self):
        return len(self._cache)

    def __contains__(self, key):
        return key in self._cache
