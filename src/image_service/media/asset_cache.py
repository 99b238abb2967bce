"""Process-local TTL cache shadowing recently written or read asset records."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Union

from .media_models import AssetDescriptor, LogoAsset

CachedAsset = Union[AssetDescriptor, LogoAsset]

DEFAULT_TTL_SECONDS = 7200.0
DEFAULT_CHECK_PERIOD_SECONDS = 600.0


def slot_cache_key(entity_id: str, position: int) -> str:
    return f"{entity_id}:{position}"


def logo_cache_key(company_id: str) -> str:
    return f"logo:{company_id}"


@dataclass(slots=True)
class _Entry:
    value: CachedAsset
    expires_at: float


@dataclass
class AssetCache:
    """In-memory cache with an absolute per-entry expiry.

    Entries expire ``ttl_seconds`` after insertion regardless of reads.
    ``sweep`` drops expired entries and is run every ``check_period_seconds``
    by the application lifecycle. Values are frozen dataclasses, so callers
    sharing an entry cannot mutate it under each other.
    """

    ttl_seconds: float = DEFAULT_TTL_SECONDS
    check_period_seconds: float = DEFAULT_CHECK_PERIOD_SECONDS
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _Entry] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def set(self, key: str, value: CachedAsset) -> None:
        expires_at = self.clock() + self.ttl_seconds
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def get(self, key: str) -> CachedAsset | None:
        now = self.clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                # expired but not yet swept
                del self._entries[key]
                return None
            return entry.value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Purge expired entries and return how many were removed."""
        now = self.clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
