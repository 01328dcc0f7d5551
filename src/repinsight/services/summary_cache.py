"""Time-limited cache for generated reports."""

import logging
from typing import Any, Optional

from diskcache import Cache

from ..core.config import settings
from ..core.constants import CacheConstants

logger = logging.getLogger(__name__)


class SummaryCache:
    """
    get/set/delete cache with a TTL, backed by diskcache.

    Any object exposing ``get(key)``, ``set(key, value, expire=...)``,
    ``delete(key)`` and ``clear()`` can be passed as the backend.
    """

    def __init__(self, cache=None, ttl_seconds: Optional[int] = None):
        self.cache = cache if cache is not None else Cache(settings.cache_dir)
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.summary_cache_ttl_hours * 3600

    @staticmethod
    def _key(key: str) -> str:
        return f"{CacheConstants.SUMMARY_KEY_PREFIX}{key}"

    def get(self, key: str) -> Optional[Any]:
        value = self.cache.get(self._key(key))
        logger.debug(f"[Cache] {'HIT' if value is not None else 'MISS'} for {key}")
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expire = ttl if ttl is not None else self.ttl_seconds
        self.cache.set(self._key(key), value, expire=expire)
        logger.debug(f"[Cache] SET for {key} (expires in {expire}s)")

    def delete(self, key: str) -> None:
        self.cache.delete(self._key(key))
        logger.debug(f"[Cache] CLEARED for {key}")

    def clear(self) -> None:
        self.cache.clear()
        logger.debug("[Cache] CLEARED ALL")
