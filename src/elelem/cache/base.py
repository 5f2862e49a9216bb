"""
Cache interface for generate and action results.

Keys are arbitrary structured values (dicts of prompts and options, action
contexts); backends hash them with ``fingerprint``. Values are text.
"""

import dataclasses
import hashlib
import json
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class ElelemCache(Protocol):
    """Async key/value cache. Both methods may fail transiently."""

    async def read(self, key: Any) -> Optional[str]:
        ...

    async def write(self, key: Any, value: str) -> None:
        ...


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _canonical(value: Any) -> Any:
    """Reduce a key component to plain JSON types."""
    if isinstance(value, Enum):
        return _canonical(value.value)
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _canonical(dataclasses.asdict(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {
            k if isinstance(k, str) else _dumps(_canonical(k)): _canonical(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_canonical(item) for item in value]
    # Tagged so (1, 2), [1, 2] and {1, 2} hash differently
    if isinstance(value, tuple):
        return {"__tuple__": [_canonical(item) for item in value]}
    if isinstance(value, (set, frozenset)):
        return {"__set__": sorted((_canonical(item) for item in value), key=_dumps)}
    raise TypeError(f"Cache key component is not JSON serializable: {type(value).__name__}")


def fingerprint(key: Any) -> str:
    """
    Deterministic SHA-256 fingerprint of a structured cache key.

    Dict ordering does not matter. Pydantic models and dataclasses are hashed
    by content, sets by their sorted members, dates by ISO format and enums by
    value.

    Raises:
        TypeError: A key component has no canonical JSON form
    """
    return hashlib.sha256(_dumps(_canonical(key)).encode("utf-8")).hexdigest()


class NullCache:
    """Cache used when no backend is configured: never hits, never stores."""

    async def read(self, key: Any) -> Optional[str]:
        return None

    async def write(self, key: Any, value: str) -> None:
        return None

    def __repr__(self) -> str:
        return "NullCache()"
