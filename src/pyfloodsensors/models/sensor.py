"""Validated flood sensor entity."""

from __future__ import annotations

from pydantic import Field, field_validator

from pyfloodsensors._constants import DEFAULT_UNIT, LATITUDE_RANGE, LONGITUDE_RANGE
from pyfloodsensors.models._base import AuthorityType, FloodBaseModel, ObservationTime


class SensorEntity(FloodBaseModel):
    """A single flood-depth sensor with its latest reading.

    Parameters
    ----------
    station_id : str or None
        Station identifier (``stationID``), scoped to its source.
    station_code : str or None
        Station code.
    station_name : str or None
        Human readable station name.
    authority_type : AuthorityType
        Which source the sensor came from.
    latitude : float
        Latitude in degrees, inside Taiwan's bounding box.
    longitude : float
        Longitude in degrees, inside Taiwan's bounding box.
    depth : float or None
        Latest flood depth. ``None`` means no recent reading.
    unit : str
        Unit of ``depth``.
    observed_at : datetime or None
        Time of the latest reading (UTC).
    """

    station_id: str | None = None
    station_code: str | None = None
    station_name: str | None = None
    authority_type: AuthorityType
    latitude: float = Field(ge=LATITUDE_RANGE[0], le=LATITUDE_RANGE[1])
    longitude: float = Field(ge=LONGITUDE_RANGE[0], le=LONGITUDE_RANGE[1])
    depth: float | None = None
    unit: str = DEFAULT_UNIT
    observed_at: ObservationTime = None

    @field_validator("station_id", "station_code", "station_name", mode="before")
    @classmethod
    def _coerce_identity(cls, value: object) -> str | None:
        if value is None:
            return None
        if isinstance(value, (dict, list)):
            raise ValueError(f"expected a scalar identifier, got {type(value).__name__}")
        text = str(value).strip()
        return text or None

    @property
    def has_reading(self) -> bool:
        return self.depth is not None

    @property
    def position(self) -> tuple[float, float]:
        """``(latitude, longitude)`` pair, the form map bounds are built from."""
        return (self.latitude, self.longitude)
