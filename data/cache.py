"""
In-process TTL cache shared by collectors and the dashboard context.
Backed by cachetools, one TTLCache per time-to-live.
"""
import threading
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Optional

from cachetools import TTLCache

from config.settings import get_settings

settings = get_settings()


class DataCache:
    """Thread-safe in-memory cache; entries expire after the ttl they were set with."""

    def __init__(self, maxsize: int = 256, timer: Callable[[], float] = time.monotonic):
        self._maxsize = maxsize
        self._timer = timer
        self._buckets: Dict[int, TTLCache] = {}
        self._lock = threading.Lock()

    def _bucket(self, ttl: int) -> TTLCache:
        bucket = self._buckets.get(ttl)
        if bucket is None:
            bucket = TTLCache(maxsize=self._maxsize, ttl=ttl, timer=self._timer)
            self._buckets[ttl] = bucket
        return bucket

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            for bucket in self._buckets.values():
                if key in bucket:
                    return bucket[key]
            return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            # A key lives in exactly one bucket
            for bucket in self._buckets.values():
                bucket.pop(key, None)
            self._bucket(ttl)[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            for bucket in self._buckets.values():
                bucket.pop(key, None)

    def clear(self, prefix: Optional[str] = None) -> None:
        """Drop every entry, or only the keys starting with prefix."""
        with self._lock:
            for bucket in self._buckets.values():
                if prefix is None:
                    bucket.clear()
                    continue
                for key in [k for k in list(bucket.keys()) if k.startswith(prefix)]:
                    bucket.pop(key, None)

    def cache_schedule(self, key: str, value: Any) -> None:
        self.set(key, value, settings.cache_schedule_ttl)

    def cache_stats(self, key: str, value: Any) -> None:
        self.set(key, value, settings.cache_stats_ttl)

    def cache_dashboard(self, key: str, value: Any) -> None:
        self.set(key, value, settings.cache_dashboard_ttl)


@lru_cache()
def get_cache() -> DataCache:
    """Get the process-wide cache instance."""
    return DataCache()
