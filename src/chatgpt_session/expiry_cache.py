from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any


class ExpiryCache:
    """Key/value store whose entries expire a fixed number of seconds after being set.

    The clock is injectable so expiry can be driven deterministically in tests.
    There is no locking and no request coalescing.
    """

    def __init__(self, max_age_seconds: float, clock: Callable[[], float] = time.monotonic):
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")
        self._max_age = max_age_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}

    @property
    def max_age_seconds(self) -> float:
        return self._max_age

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        value, stored_at = entry
        if self._clock() - stored_at >= self._max_age:
            del self._entries[key]
            return default
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def __len__(self) -> int:
        return sum(1 for key in list(self._entries) if key in self)
