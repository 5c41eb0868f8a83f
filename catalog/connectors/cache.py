"""
Caching for gallery image lookups.

The catalog views re-run the pipeline on every keystroke (after debounce),
so the per-specimen gallery lookup is cached in memory with a TTL.

Cache keys follow the pattern:
    images:{kind}:{specimen_id}
"""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any


def make_cache_key(kind: str, specimen_id: str) -> str:
    """Generate the cache key for a specimen's gallery."""
    return f"images:{kind}:{specimen_id}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryCache:
    """
    Gallery URL lists keyed by specimen, least recently used evicted first.

    Entries expire ``default_ttl`` seconds after they are stored; ``None`` or
    0 keeps them until evicted. Lives in one process only.
    """

    def __init__(self, max_size: int = 1000, default_ttl: int | None = None):
        self._entries: OrderedDict[str, tuple[Any, datetime | None]] = OrderedDict()
        self._max_size = max(1, max_size)
        self._ttl = timedelta(seconds=default_ttl) if default_ttl else None

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and _now() >= expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        """Store ``value``, evicting the least recently used entry when full."""
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_size:
            self._entries.popitem(last=False)

        expires_at = _now() + self._ttl if self._ttl else None
        self._entries[key] = (value, expires_at)
