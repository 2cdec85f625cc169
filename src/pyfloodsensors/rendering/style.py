"""Depth colour scale and marker detail payloads for render sinks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from pyfloodsensors.models._base import AuthorityType
from pyfloodsensors.models.sensor import SensorEntity

NO_DATA_COLOR = "#9CA3AF"

# (exclusive upper bound in cm, colour); depths at or above the last bound are red.
_DEPTH_SCALE: tuple[tuple[float, str], ...] = (
    (1.0, "#77A9FA"),
    (10.0, "#10B981"),
    (30.0, "#D6F50B"),
    (50.0, "#F18538"),
)
_SEVERE_COLOR = "#CB0D0D"

_AUTHORITY_COLORS: dict[AuthorityType, str] = {
    AuthorityType.PRIMARY: "#103B99",
    AuthorityType.JOINT: "#9333EA",
}

NO_DATA_LABEL = "無資料"

# Readings are displayed in Taiwan local time.
TAIWAN_TZ = timezone(timedelta(hours=8), "Asia/Taipei")


def depth_color(depth: float | None) -> str:
    """Legend colour for a flood depth in centimetres."""
    if depth is None or math.isnan(depth):
        return NO_DATA_COLOR
    for upper, color in _DEPTH_SCALE:
        if depth < upper:
            return color
    return _SEVERE_COLOR


def authority_color(authority_type: AuthorityType) -> str:
    return _AUTHORITY_COLORS[authority_type]


def format_depth(depth: float | None, unit: str) -> str:
    if depth is None or math.isnan(depth):
        return NO_DATA_LABEL
    return f"{depth:.2f} {unit}"


def format_observed_at(observed_at: datetime | None) -> str:
    if observed_at is None:
        return NO_DATA_LABEL
    return observed_at.astimezone(TAIWAN_TZ).strftime("%Y/%m/%d %H:%M")


@dataclass(frozen=True, slots=True)
class SensorDetail:
    """Popup payload for one marker."""

    name: str
    station_id: str
    station_code: str
    depth: str
    observed_at: str
    source: str
    depth_color: str
    source_color: str

    @classmethod
    def from_entity(cls, entity: SensorEntity) -> SensorDetail:
        return cls(
            name=entity.station_name or "",
            station_id=entity.station_id or "",
            station_code=entity.station_code or "",
            depth=format_depth(entity.depth, entity.unit),
            observed_at=format_observed_at(entity.observed_at),
            source=entity.authority_type.value,
            depth_color=depth_color(entity.depth),
            source_color=authority_color(entity.authority_type),
        )
