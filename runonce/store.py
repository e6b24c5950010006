"""Key-value store interface and the in-memory implementation.

Serialized stores (file, redis) share the JSON codec below: counters are
encoded as integers and instants as float seconds since the epoch.
"""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol


class StoreError(RuntimeError):
    """Raised when a backing store cannot be read or written."""


class KeyValueStore(Protocol):
    def get_int(self, key: str) -> Optional[int]:
        ...

    def get_timestamp(self, key: str) -> Optional[datetime]:
        ...

    def set_int(self, key: str, value: int) -> None:
        ...

    def set_timestamp(self, key: str, value: datetime) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


def decode_int(raw: Any) -> Optional[int]:
    # bool is an int subclass; floats are timestamps
    if isinstance(raw, bool) or not isinstance(raw, int):
        return None
    return raw


def decode_timestamp(raw: Any) -> Optional[datetime]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    except (OverflowError, ValueError, OSError) as exc:
        raise StoreError(f"stored timestamp {raw!r} is out of range") from exc


def encode_timestamp(value: datetime) -> float:
    return value.timestamp()


class MemoryStore:
    """Dict-backed store. The default session store; contents die with it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, Any] = {}

    def get_int(self, key: str) -> Optional[int]:
        with self._lock:
            return decode_int(self._values.get(key))

    def get_timestamp(self, key: str) -> Optional[datetime]:
        with self._lock:
            value = self._values.get(key)
        return value if isinstance(value, datetime) else None

    def set_int(self, key: str, value: int) -> None:
        with self._lock:
            self._values[key] = int(value)

    def set_timestamp(self, key: str, value: datetime) -> None:
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)
