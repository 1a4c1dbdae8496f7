"""ResultCache abstraction + in-memory TTL backend.

Entries expire lazily: nothing runs in the background, an expired entry is
dropped the next time its key is read.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Hashable, Optional, Protocol


class ResultCache(Protocol):
    """Protocol for finished-result caches. Implementations: InMemoryResultCache."""

    def get(self, key: Hashable) -> Optional[Any]:
        ...

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ...

    def has(self, key: Hashable) -> bool:
        ...

    def delete(self, key: Hashable) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemoryResultCache:
    """Process-local key -> (expires_at, value) store."""

    def __init__(
        self,
        default_ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be positive")
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}

    @property
    def default_ttl_seconds(self) -> float:
        return self._default_ttl

    def _live_entry(self, key: Hashable) -> Optional[tuple[float, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, _ = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return entry

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._live_entry(key)
        return entry[1] if entry is not None else None

    def has(self, key: Hashable) -> bool:
        return self._live_entry(key) is not None

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        self._entries[key] = (self._clock() + ttl, value)

    def delete(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
