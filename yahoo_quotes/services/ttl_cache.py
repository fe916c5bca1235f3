from __future__ import annotations

import copy
import threading
import time
from typing import Any, NamedTuple


class CacheEntry(NamedTuple):
    value: Any
    stored_at: float


class TtlCache:
    """Lock-guarded key/value store with per-entry expiry.

    Expired entries are dropped lazily on read, and in one sweep on write once
    the store grows past ``max_entries``. Values are deep-copied on the way out.
    """

    def __init__(self, ttl_sec: float = 300, max_entries: int = 100) -> None:
        self.ttl_sec = ttl_sec
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_sec

    def get(self, key: str, now: float | None = None) -> Any | None:
        ref = time.time() if now is None else now
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, ref):
                self._entries.pop(key, None)
                return None
            return copy.deepcopy(entry.value)

    def put(self, key: str, value: Any, now: float | None = None) -> None:
        ref = time.time() if now is None else now
        with self._lock:
            if len(self._entries) > self.max_entries:
                self._sweep_expired(ref)
            self._entries[key] = CacheEntry(value=copy.deepcopy(value), stored_at=ref)

    def _sweep_expired(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if self._expired(entry, now)]
        for k in expired:
            self._entries.pop(k, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
