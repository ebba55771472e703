"""In-process TTL cache for computed health results.

Entries are keyed by (household_id, month, year, input_hash). The hash covers
the whole ledger snapshot and settings, so any ledger change misses the cache
by construction; settings updates drop the household's entries explicitly.
"""

import hashlib
import json
import threading
import time
from collections import OrderedDict
from dataclasses import asdict, is_dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

from budget_gateway.infrastructure.observability.metrics import health_cache_counter

T = TypeVar("T")

CacheKey = Tuple[str, int, int, str]


def _json_default(value: Any) -> Any:
    if isinstance(value, (Decimal, date)):
        return str(value)
    if is_dataclass(value):
        return asdict(value)
    raise TypeError(f"Cannot hash {type(value).__name__}")


def input_hash(payload: Any) -> str:
    """Stable SHA-256 over the computation inputs"""
    serialized = json.dumps(payload, default=_json_default, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(serialized.encode()).hexdigest()


class HealthCache(Generic[T]):
    """Bounded LRU cache with per-entry expiry"""

    def __init__(self, ttl_seconds: float, max_entries: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, Tuple[float, T]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[0] <= self._clock():
                self._entries.pop(key, None)
                health_cache_counter.labels(result="miss").inc()
                return None
            self._entries.move_to_end(key)
            health_cache_counter.labels(result="hit").inc()
            return entry[1]

    def put(self, key: CacheKey, value: T) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate_household(self, household_id: str) -> int:
        """Drop every entry of a household, returns how many were removed"""
        with self._lock:
            stale = [key for key in self._entries if key[0] == household_id]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
