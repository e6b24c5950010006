from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

import redis

from runonce import config
from runonce.store import StoreError, decode_int, decode_timestamp, encode_timestamp

log = logging.getLogger(__name__)


class RedisStore:
    """
    Durable store backed by Redis. Each value lives under ``prefix + key`` as
    a JSON scalar, the same encoding the file store uses.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        prefix: Optional[str] = None,
        client: Optional["redis.Redis[str]"] = None,
    ) -> None:
        self.redis_url = (redis_url or config.REDIS_URL).strip() or config.REDIS_URL
        self.prefix = config.REDIS_PREFIX if prefix is None else prefix
        # Connection is lazy; nothing hits the network until the first command.
        self._client = client if client is not None else redis.from_url(self.redis_url, decode_responses=True)

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _get(self, key: str) -> Any:
        try:
            raw = self._client.get(self._k(key))
        except redis.RedisError as exc:
            raise StoreError(f"redis get failed for {key!r}: {exc}") from exc
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            log.warning("redis_store.get: undecodable value under %s", self._k(key))
            raise StoreError(f"undecodable value for {key!r}") from exc

    def _set(self, key: str, value: Any) -> None:
        try:
            self._client.set(self._k(key), json.dumps(value))
        except redis.RedisError as exc:
            raise StoreError(f"redis set failed for {key!r}: {exc}") from exc

    def get_int(self, key: str) -> Optional[int]:
        return decode_int(self._get(key))

    def get_timestamp(self, key: str) -> Optional[datetime]:
        return decode_timestamp(self._get(key))

    def set_int(self, key: str, value: int) -> None:
        self._set(key, int(value))

    def set_timestamp(self, key: str, value: datetime) -> None:
        self._set(key, encode_timestamp(value))

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._k(key))
        except redis.RedisError as exc:
            raise StoreError(f"redis delete failed for {key!r}: {exc}") from exc
