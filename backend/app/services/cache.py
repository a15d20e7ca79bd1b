import time
from typing import Any, Callable


class TTLCache:
    """
    Very simple in-memory cache.
    Entries expire lazily: a read that finds an expired entry drops it.
    """

    def __init__(self, default_ttl: int = 3600, clock: Callable[[], float] = time.time):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str):
        hit = self._entries.get(key)
        if not hit:
            return None
        expires_at, value = hit
        if self._clock() > expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = (self._clock() + ttl, value)

    def expire(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def live_items(self, prefix: str = "") -> list[tuple[str, Any]]:
        items = []
        for key in list(self._entries):
            if not key.startswith(prefix):
                continue
            value = self.get(key)
            if value is not None:
                items.append((key, value))
        return items

    def __len__(self) -> int:
        return len(self._entries)
