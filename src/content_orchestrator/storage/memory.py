"""In-memory state store for tests and single-process deployments."""

from __future__ import annotations

import time
from typing import Callable


class InMemoryStateStore:
    """Dict-backed store honouring per-key expiry."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._values: dict[str, tuple[str, float | None]] = {}

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> None:
        expires_at = self._clock() + ttl_s if ttl_s is not None else None
        self._values[key] = (value, expires_at)

    async def get(self, key: str) -> str | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._values[key]
            return None
        return value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        now = self._clock()
        return sorted(
            key
            for key, (_, expires_at) in self._values.items()
            if expires_at is None or now < expires_at
        )
