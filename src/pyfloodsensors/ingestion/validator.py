"""Raw SensorThings datastream → :class:`SensorEntity`.

A raw record looks like::

    {
        "unitOfMeasurement": {"symbol": "cm"},
        "Thing": {
            "properties": {"stationID": "...", "stationCode": "...", "stationName": "..."},
            "Locations": [{"location": {"type": "Point", "coordinates": [121.5, 25.0]}}],
        },
        "Observations": [{"result": 3.2, "phenomenonTime": "2025-07-01T08:10:00.000Z"}],
    }

Anything structurally wrong is rejected by returning ``None``; validation
never raises, so one bad record cannot abort a batch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from pyfloodsensors._constants import DEFAULT_UNIT, LATITUDE_RANGE, LONGITUDE_RANGE
from pyfloodsensors.ingestion.normalize import (
    Malformed,
    first_item,
    mapping_or_empty,
    parse_coordinates,
    safe_float,
    safe_str,
)
from pyfloodsensors.models._base import AuthorityType
from pyfloodsensors.models.sensor import SensorEntity

_logger = logging.getLogger(__name__)


class RecordValidator:
    """Normalizes and validates raw sensor records."""

    def __init__(
        self,
        *,
        lat_range: tuple[float, float] = LATITUDE_RANGE,
        lon_range: tuple[float, float] = LONGITUDE_RANGE,
    ) -> None:
        self._lat_range = lat_range
        self._lon_range = lon_range

    def validate(self, raw: Any, authority_type: AuthorityType) -> SensorEntity | None:
        """Return a canonical entity for *raw*, or ``None`` to reject it."""
        if not isinstance(raw, Mapping):
            return None
        try:
            fields = self._extract(raw)
        except Malformed as exc:
            _logger.debug("Rejecting record: %s", exc)
            return None
        if fields is None:
            return None
        try:
            return SensorEntity(authority_type=authority_type, **fields)
        except ValidationError as exc:
            _logger.debug("Rejecting record: %d validation error(s)", exc.error_count())
            return None

    def validate_many(self, raws: Iterable[Any], authority_type: AuthorityType) -> list[SensorEntity]:
        """Validate a batch, keeping input order and dropping rejects."""
        accepted: list[SensorEntity] = []
        rejected = 0
        for raw in raws:
            entity = self.validate(raw, authority_type)
            if entity is None:
                rejected += 1
            else:
                accepted.append(entity)
        if rejected:
            _logger.info("%s: accepted %d record(s), rejected %d", authority_type.name, len(accepted), rejected)
        return accepted

    def _extract(self, raw: Mapping[str, Any]) -> dict[str, Any] | None:
        thing = mapping_or_empty(raw.get("Thing"), field="Thing")
        properties = mapping_or_empty(thing.get("properties"), field="Thing.properties")

        location = mapping_or_empty(first_item(thing.get("Locations"), field="Thing.Locations"), field="Location")
        geometry = mapping_or_empty(location.get("location"), field="Location.location")
        coords = parse_coordinates(
            geometry.get("coordinates"),
            lat_range=self._lat_range,
            lon_range=self._lon_range,
        )
        if coords is None:
            return None

        observation = mapping_or_empty(first_item(raw.get("Observations"), field="Observations"), field="Observation")
        unit = mapping_or_empty(raw.get("unitOfMeasurement"), field="unitOfMeasurement")

        latitude, longitude = coords
        return {
            "station_id": properties.get("stationID"),
            "station_code": properties.get("stationCode"),
            "station_name": properties.get("stationName"),
            "latitude": latitude,
            "longitude": longitude,
            "depth": safe_float(observation.get("result")),
            "unit": safe_str(unit.get("symbol")) or DEFAULT_UNIT,
            "observed_at": observation.get("phenomenonTime"),
        }
