"""Storage interface for run state and short-lived pipeline artifacts."""

from __future__ import annotations

from typing import Protocol


class StateStore(Protocol):
    """Key-value persistence with optional per-key expiry.

    ``ttl_s=None`` stores the value without expiry.
    """

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> None: ...
