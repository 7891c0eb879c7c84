"""
In-process TTL cache.

One value per key, each stamped with the time it was stored. The clock is
injectable so expiry can be tested without sleeping.
"""
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional


@dataclass
class _Entry:
    value: Any
    stored_at: float


class TTLCache:
    """Key/value cache whose entries expire ``ttl_seconds`` after being set."""

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, _Entry] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Fresh value for ``key``, or ``default`` when missing or expired."""
        entry = self._entries.get(key)
        if entry is None or self._expired(entry):
            return default
        return entry.value

    def get_stale(self, key: Hashable, default: Any = None) -> Any:
        """Last stored value for ``key`` regardless of age."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else default

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry)

    def _expired(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at >= self.ttl_seconds
