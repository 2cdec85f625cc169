"""Normalization helpers.

Centralizes defensive parsing of the nested SensorThings payloads.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pyfloodsensors._constants import LATITUDE_RANGE, LONGITUDE_RANGE


class Malformed(Exception):
    """Raised by the helpers here when a payload has the wrong structure."""


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def mapping_or_empty(value: Any, *, field: str) -> Mapping[str, Any]:
    """Return *value* if it is a mapping, ``{}`` if absent, else raise :class:`Malformed`."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise Malformed(f"{field} is {type(value).__name__}, expected an object")
    return value


def first_item(value: Any, *, field: str) -> Any:
    """Return the first element of a list, ``None`` if absent or empty.

    Sources return their observations newest first, so the first element is
    the latest reading.
    """
    if value is None:
        return None
    if not isinstance(value, list):
        raise Malformed(f"{field} is {type(value).__name__}, expected an array")
    return value[0] if value else None


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def parse_coordinates(
    coords: Any,
    *,
    lat_range: tuple[float, float] = LATITUDE_RANGE,
    lon_range: tuple[float, float] = LONGITUDE_RANGE,
) -> tuple[float, float] | None:
    """Resolve a raw coordinate pair to ``(latitude, longitude)``.

    Sources are inconsistent about axis order, so both orderings are tried
    against the bounding box. Returns ``None`` when neither ordering fits or
    either component is not a number.
    """
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    a = safe_float(coords[0])
    b = safe_float(coords[1])
    if a is None or b is None:
        return None
    if _in_range(a, lat_range) and _in_range(b, lon_range):
        return (a, b)
    if _in_range(b, lat_range) and _in_range(a, lon_range):
        return (b, a)
    return None
