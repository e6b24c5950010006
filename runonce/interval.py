from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IntervalUnit = Literal["seconds", "milliseconds", "microseconds", "nanoseconds", "never"]

_DIVISORS = {
    "seconds": 1,
    "milliseconds": 1_000,
    "microseconds": 1_000_000,
    "nanoseconds": 1_000_000_000,
}


def utc_now() -> datetime:
    """Default time source."""
    return datetime.now(timezone.utc)


class Interval(BaseModel):
    """A span of time in one of the supported units.

    ``never`` is an infinitely long interval: once a run has been recorded,
    an ``IfTimeElapsed`` policy using it will not fire again.
    """

    model_config = ConfigDict(frozen=True)

    value: int = Field(0, ge=0)
    unit: IntervalUnit = "seconds"

    @classmethod
    def seconds(cls, value: int) -> "Interval":
        return cls(value=value, unit="seconds")

    @classmethod
    def milliseconds(cls, value: int) -> "Interval":
        return cls(value=value, unit="milliseconds")

    @classmethod
    def microseconds(cls, value: int) -> "Interval":
        return cls(value=value, unit="microseconds")

    @classmethod
    def nanoseconds(cls, value: int) -> "Interval":
        return cls(value=value, unit="nanoseconds")

    @classmethod
    def never(cls) -> "Interval":
        return cls(unit="never")

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> "Interval":
        micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
        return cls(value=micros, unit="microseconds")

    def to_seconds(self) -> float:
        if self.unit == "never":
            return math.inf
        # Divide rather than multiply so 10**9 ns is exactly 1.0
        return self.value / _DIVISORS[self.unit]


def has_elapsed(recorded: datetime, interval: Interval, now: datetime) -> bool:
    """True iff ``recorded + interval`` is strictly before ``now``.

    Compared as datetimes (microsecond resolution); epoch floats lose
    sub-microsecond precision and misplace the boundary.
    """
    seconds = interval.to_seconds()
    if math.isinf(seconds):
        return False
    # Naive instants are local time, as datetime.timestamp() reads them
    if (recorded.tzinfo is None) != (now.tzinfo is None):
        recorded, now = recorded.astimezone(), now.astimezone()
    try:
        deadline = recorded + timedelta(seconds=seconds)
    except OverflowError:
        return False
    return deadline < now
