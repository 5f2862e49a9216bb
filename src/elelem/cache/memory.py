"""
In-process cache backend.

Suitable for tests and single-process scripts; entries live as long as the
InMemoryCache instance.
"""

from typing import Any, Optional

from elelem.cache.base import fingerprint


class InMemoryCache:
    """Dict-backed ElelemCache keyed by fingerprint."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    async def read(self, key: Any) -> Optional[str]:
        return self._entries.get(fingerprint(key))

    async def write(self, key: Any, value: str) -> None:
        self._entries[fingerprint(key)] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"InMemoryCache(entries={len(self._entries)})"
