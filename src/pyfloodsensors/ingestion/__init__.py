"""Ingestion layer.

Converts raw remote records into validated :class:`SensorEntity` values.
"""

from pyfloodsensors.ingestion.validator import RecordValidator

__all__ = ["RecordValidator"]
