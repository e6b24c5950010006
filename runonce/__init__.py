from runonce.gate import Gate, default_gate, only
from runonce.interval import Interval, utc_now
from runonce.policy import (
    AllOf,
    AnyOf,
    EveryNTimes,
    If,
    IfTimeElapsed,
    Once,
    OncePerSession,
    Policy,
    composite_key,
)
from runonce.store import KeyValueStore, MemoryStore, StoreError

__all__ = [
    "AllOf",
    "AnyOf",
    "EveryNTimes",
    "Gate",
    "If",
    "IfTimeElapsed",
    "Interval",
    "KeyValueStore",
    "MemoryStore",
    "Once",
    "OncePerSession",
    "Policy",
    "StoreError",
    "composite_key",
    "default_gate",
    "only",
    "utc_now",
]
