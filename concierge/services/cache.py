"""Thread-safe in-memory cache bounded by entry count.

Design decisions
────────────────
• **OrderedDict** for O(1) eviction from the oldest end.
• Two eviction orders from one class:
    - ``promote_on_read=True``  → least-recently-used (session store);
    - ``promote_on_read=False`` → oldest-inserted first (query embeddings).
• **threading.Lock** for thread safety (FastAPI runs the blocking agent in
  a thread pool, so several requests may touch the same cache).
• Purely ephemeral — data is lost on process restart.

>>> cache = BoundedCache(max_entries=2, promote_on_read=False)
>>> cache.put("a", [0.1, 0.2])
>>> cache.put("b", [0.3, 0.4])
>>> cache.put("c", [0.5, 0.6])   # evicts "a"
>>> cache.get("a") is None
True
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100


class BoundedCache:
    """Key/value cache holding at most ``max_entries`` items."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        *,
        promote_on_read: bool = True,
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._max_entries = max_entries
        self._promote_on_read = promote_on_read
        self._store: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    # ── Core operations ──────────────────────────────────────────────

    def get(self, key: str) -> Any | None:
        """Return the cached value or ``None``."""
        with self._lock:
            if key not in self._store:
                return None
            if self._promote_on_read:
                self._store.move_to_end(key)
            return self._store[key]

    def put(self, key: str, value: Any) -> None:
        """Insert or overwrite *key*, evicting from the oldest end if full."""
        with self._lock:
            self._insert(key, value)

    def get_or_create(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the value for *key*, creating it with *factory* if absent.

        The lookup and the insert happen under one lock acquisition, so two
        threads asking for the same missing key get the same object.
        """
        with self._lock:
            if key in self._store:
                if self._promote_on_read:
                    self._store.move_to_end(key)
                return self._store[key]
            value = factory()
            self._insert(key, value)
            return value

    def invalidate(self, key: str) -> bool:
        """Remove a single key.  Returns ``True`` if the key existed."""
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._store.clear()

    # ── Introspection ────────────────────────────────────────────────

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def entry_count(self) -> int:
        """Number of entries currently stored."""
        return len(self._store)

    def has(self, key: str) -> bool:
        """Check if a key is present *without* promoting it."""
        return key in self._store

    # ── Internal ─────────────────────────────────────────────────────

    def _insert(self, key: str, value: Any) -> None:
        # Caller holds the lock
        if key in self._store:
            self._store.pop(key)
        while len(self._store) >= self._max_entries:
            evicted_key, _ = self._store.popitem(last=False)
            logger.debug("Cache: evicted %s", evicted_key)
        self._store[key] = value
