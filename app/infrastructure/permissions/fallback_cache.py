"""
Adapter: In-process fallback cache.

Implements FallbackCache port with a bounded LRU mapping. Holds the last
permission written per user while the trade_permissions table is absent.
Entries never expire; the least recently used user is dropped at capacity.
"""

import threading
from typing import Optional

from cachetools import LRUCache

from app.domain.permissions.entities import TradePermission
from app.domain.permissions.ports import FallbackCache


class LruFallbackCache(FallbackCache):
    """Thread-safe LRU cache of permissions keyed by user id."""

    def __init__(self, maxsize: int = 10_000) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._cache: LRUCache = LRUCache(maxsize=maxsize)
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[TradePermission]:
        with self._lock:
            return self._cache.get(user_id)

    def put(self, user_id: str, permission: TradePermission) -> None:
        with self._lock:
            self._cache[user_id] = permission

    def discard(self, user_id: str) -> None:
        with self._lock:
            self._cache.pop(user_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
