"""Pydantic models for the company and user record sets.

Both models run their checks in a fixed order before pydantic's own field
validation: presence of every required field first, then the boolean fields,
then the numeric fields. A record that fails any check raises
`pydantic.ValidationError` and no entity is created.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sized
from typing import Any, ClassVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)

Number = Union[StrictInt, StrictFloat]


def _is_missing(value: Any) -> bool:
    """Return True for None and for empty sized values such as ``""``."""
    if value is None:
        return True
    return isinstance(value, Sized) and len(value) == 0


def _is_number(value: Any) -> bool:
    """Return True for finite ints and floats; booleans, NaN and infinities are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def check_presence(data: Mapping[str, Any], fields: tuple[str, ...]) -> None:
    """Raise ValueError listing every field in `fields` that is missing.

    Args:
        data: Raw record.
        fields: Required field names, in the order they should be reported.
    """
    missing = [f for f in fields if _is_missing(data.get(f))]
    if missing:
        raise ValueError(f"Missing required attributes: {', '.join(missing)}")


def check_booleans(data: Mapping[str, Any], fields: tuple[str, ...]) -> None:
    """Raise ValueError for the first field that is not exactly True/False."""
    for f in fields:
        if data[f] is not True and data[f] is not False:
            raise ValueError(f"{f} must be a boolean (true or false)")


class Company(BaseModel):
    """A company granting a fixed token top-up to each of its active users.

    Attributes:
        id: Unique integer id within the company set.
        name: Display name used in the report.
        top_up: Tokens credited per active user (strictly positive).
        email_status: Whether the company allows email notifications.
    """
    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    REQUIRED: ClassVar[tuple[str, ...]] = ("id", "name", "top_up", "email_status")

    id: StrictInt
    name: StrictStr
    top_up: Number
    email_status: StrictBool

    @model_validator(mode="before")
    @classmethod
    def _validate_record(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        check_presence(data, cls.REQUIRED)
        check_booleans(data, ("email_status",))
        if not _is_number(data["top_up"]) or not data["top_up"] > 0:
            raise ValueError("top_up must be a positive number")
        return data


class User(BaseModel):
    """A user account holding a token balance.

    `company` is resolved by the loader and passed in at construction; the
    model keeps the very same `Company` instance. `tokens` is the only field
    changed after construction (by `topup_report.topup.apply_top_up`).
    """
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    REQUIRED: ClassVar[tuple[str, ...]] = (
        "id",
        "first_name",
        "last_name",
        "email",
        "email_status",
        "active_status",
        "tokens",
    )

    id: Any
    first_name: StrictStr
    last_name: StrictStr
    email: StrictStr
    email_status: StrictBool
    active_status: StrictBool
    tokens: Number
    company: Company | None = None

    @model_validator(mode="before")
    @classmethod
    def _validate_record(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        check_presence(data, cls.REQUIRED)
        check_booleans(data, ("email_status", "active_status"))
        if not _is_number(data["tokens"]):
            raise ValueError("tokens must be a number")
        return data
