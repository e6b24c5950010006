from __future__ import annotations

import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_PROFILE: str = os.getenv("RUNONCE_PROFILE", "com.execute.only").strip() or "com.execute.only"

# Durable backend: "file" (default), "redis" or "memory"
STORE_BACKEND: str = os.getenv("RUNONCE_STORE", "file").strip().lower()
STORE_FILE = Path(os.getenv("RUNONCE_STORE_FILE", "~/.config/runonce/preferences.json")).expanduser()

REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_PREFIX: str = os.getenv("RUNONCE_REDIS_PREFIX", "runonce:")


def build_durable_store():
    """Construct the durable store selected by ``RUNONCE_STORE``."""
    if STORE_BACKEND == "file":
        from runonce.file_store import JsonFileStore

        log.info("config.build_durable_store: using file store at %s", STORE_FILE)
        return JsonFileStore(STORE_FILE)
    if STORE_BACKEND == "redis":
        from runonce.redis_store import RedisStore

        log.info("config.build_durable_store: using redis store prefix=%s", REDIS_PREFIX)
        return RedisStore(REDIS_URL, REDIS_PREFIX)
    if STORE_BACKEND == "memory":
        from runonce.store import MemoryStore

        log.info("config.build_durable_store: using in-memory store (not durable)")
        return MemoryStore()
    raise ValueError(f"Unknown RUNONCE_STORE backend {STORE_BACKEND!r}")
