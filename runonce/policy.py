"""Frequency policies.

A policy is one member of a closed set of pydantic models discriminated on
``kind``. Keyed policies take either a plain string or a ``str``-valued Enum
member as their key; Enum members are stored as their value.
"""
from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Annotated, Any, Callable, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from runonce.interval import Interval

KEY_SEPARATOR = "."


def normalize_key(value: Any) -> Any:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        if not value:
            raise ValueError("key must be a non-empty string")
        if KEY_SEPARATOR in value:
            raise ValueError(f"key {value!r} must not contain {KEY_SEPARATOR!r}")
    return value


class _Keyed(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str

    @field_validator("key", mode="before")
    @classmethod
    def _check_key(cls, value: Any) -> Any:
        return normalize_key(value)


class Once(_Keyed):
    kind: Literal["once"] = "once"


class OncePerSession(_Keyed):
    kind: Literal["once_per_session"] = "once_per_session"


class IfTimeElapsed(_Keyed):
    kind: Literal["if_time_elapsed"] = "if_time_elapsed"
    interval: Interval

    @field_validator("interval", mode="before")
    @classmethod
    def _coerce_timedelta(cls, value: Any) -> Any:
        if isinstance(value, timedelta):
            return Interval.from_timedelta(value)
        return value


class EveryNTimes(_Keyed):
    kind: Literal["every_n_times"] = "every_n_times"
    times: int = Field(gt=0)


class If(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["if"] = "if"
    predicate: Callable[[], bool]


class AnyOf(BaseModel):
    """Holds when at least one sub-policy holds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["any_of"] = "any_of"
    policies: List["Policy"] = Field(min_length=1)


class AllOf(BaseModel):
    """Holds when every sub-policy holds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["all_of"] = "all_of"
    policies: List["Policy"] = Field(min_length=1)


Policy = Annotated[
    Union[Once, OncePerSession, IfTimeElapsed, If, EveryNTimes, AnyOf, AllOf],
    Field(discriminator="kind"),
]

AnyOf.model_rebuild()
AllOf.model_rebuild()


def composite_key(profile: str, key: str) -> str:
    """Address of ``key`` inside ``profile``.

    Keys never contain the separator, so the last separator in the result
    splits it back into exactly one (profile, key) pair.
    """
    if not profile:
        raise ValueError("profile must be a non-empty string")
    return f"{profile}{KEY_SEPARATOR}{key}"
