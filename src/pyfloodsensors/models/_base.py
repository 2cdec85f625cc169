"""Base model and enums for flood sensor data.

Every model inherits from :class:`FloodBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase keys (as used by the
  remote service and by JSON consumers) map to snake_case fields.
* Frozen instances, so values can be handed between pipeline stages
  without defensive copies.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from pyfloodsensors._constants import AUTHORITY_JOINT, AUTHORITY_PRIMARY

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


class AuthorityType(StrEnum):
    """Operator of a sensor, valued by the label the remote service filters on."""

    PRIMARY = AUTHORITY_PRIMARY
    JOINT = AUTHORITY_JOINT


class ResultOrigin(StrEnum):
    LIVE = "live"
    CACHE = "cache"


def parse_observation_time(value: Any) -> datetime | None:
    """Coerce an ISO-8601 string or epoch number to an aware UTC datetime.

    Returns ``None`` for ``None``/empty input. Anything else that cannot be
    parsed raises :class:`ValueError`, which pydantic reports as a
    validation error.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError(f"not a timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"not a timestamp: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


ObservationTime = Annotated[datetime | None, BeforeValidator(parse_observation_time)]
"""Annotated type that coerces ISO strings or epoch values to UTC datetimes."""


class FloodBaseModel(BaseModel):
    """Base for all pyfloodsensors value models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
