"""In-memory response cache keyed by query key, invalidated by key prefix."""

import logging
import time
from typing import Any, Callable, Dict, Hashable, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]


def normalize_key(key: Sequence[Any]) -> QueryKey:
    """Lists and tuples alike; ids compare equal whether given as 3 or "3"."""
    if isinstance(key, str):
        key = (key,)
    return tuple(str(part) for part in key)


class QueryCache:
    """
    Cached GET results.

    Entries never go stale unless ``stale_time`` (seconds) is set. Writes
    drop every entry under a key prefix, so invalidating ("/api/movies",)
    also drops ("/api/movies", "3", "showtimes").
    """

    def __init__(self, stale_time: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: Dict[QueryKey, Tuple[float, Any]] = {}

    def __contains__(self, key) -> bool:
        return normalize_key(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, stored_at: float) -> bool:
        return self.stale_time is None or self._clock() - stored_at < self.stale_time

    def get(self, key, default=None):
        entry = self._entries.get(normalize_key(key))
        if entry is None or not self._is_fresh(entry[0]):
            return default
        return entry[1]

    def set(self, key, value) -> None:
        self._entries[normalize_key(key)] = (self._clock(), value)

    def fetch(self, key, loader: Callable[[], Any]) -> Any:
        """Cached value for ``key``, loading and storing it on a miss."""
        nkey = normalize_key(key)
        entry = self._entries.get(nkey)
        if entry is not None and self._is_fresh(entry[0]):
            return entry[1]
        value = loader()
        self._entries[nkey] = (self._clock(), value)
        return value

    def invalidate(self, prefix) -> int:
        prefix = normalize_key(prefix)
        size = len(prefix)
        stale = [k for k in self._entries if k[:size] == prefix]
        for k in stale:
            del self._entries[k]
        logger.debug(f"Invalidated {len(stale)} cached queries under {'/'.join(prefix)}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
