"""Data models for flood sensor data."""

from pyfloodsensors.models._base import (
    AuthorityType,
    FloodBaseModel,
    ObservationTime,
    ResultOrigin,
    parse_observation_time,
)
from pyfloodsensors.models.fetch import FetchJob, SourceFetchResult
from pyfloodsensors.models.result import CacheEntry, MergedResult, SensorStats
from pyfloodsensors.models.sensor import SensorEntity

__all__ = [
    "AuthorityType",
    "CacheEntry",
    "FetchJob",
    "FloodBaseModel",
    "MergedResult",
    "ObservationTime",
    "ResultOrigin",
    "SensorEntity",
    "SensorStats",
    "SourceFetchResult",
    "parse_observation_time",
]
