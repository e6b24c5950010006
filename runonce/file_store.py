from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from runonce.store import StoreError, decode_int, decode_timestamp, encode_timestamp

log = logging.getLogger(__name__)


class JsonFileStore:
    """Durable store kept in a single JSON object on disk.

    Every operation re-reads the file so that values written by another
    instance (or an earlier run of the process) are always visible. Writes go
    through a ``.tmp`` sibling and ``Path.replace`` so a crash never leaves a
    half-written file behind.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"cannot read {self.path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("file_store.read: corrupt store file %s", self.path)
            raise StoreError(f"corrupt store file {self.path}") from exc
        if not isinstance(data, dict):
            log.warning("file_store.read: store file %s is not a JSON object", self.path)
            raise StoreError(f"store file {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, separators=(",", ":")), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise StoreError(f"cannot write {self.path}: {exc}") from exc

    def _get(self, key: str) -> Any:
        with self._lock:
            return self._read().get(key)

    def _set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def get_int(self, key: str) -> Optional[int]:
        return decode_int(self._get(key))

    def get_timestamp(self, key: str) -> Optional[datetime]:
        return decode_timestamp(self._get(key))

    def set_int(self, key: str, value: int) -> None:
        self._set(key, int(value))

    def set_timestamp(self, key: str, value: datetime) -> None:
        self._set(key, encode_timestamp(value))

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)
