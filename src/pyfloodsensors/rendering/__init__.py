"""Rendering layer.

Turns a merged result into marker placements on render sinks supplied by
the UI, without blocking the event loop.
"""

from pyfloodsensors.rendering.display import DisplayOutcome, SensorDisplay
from pyfloodsensors.rendering.grouping import SpatialGrouper, SpatialGroups
from pyfloodsensors.rendering.scheduler import BatchScheduler, PlacedMarker, RenderReport, RenderSink
from pyfloodsensors.rendering.style import SensorDetail, authority_color, depth_color

__all__ = [
    "BatchScheduler",
    "DisplayOutcome",
    "PlacedMarker",
    "RenderReport",
    "RenderSink",
    "SensorDetail",
    "SensorDisplay",
    "SpatialGrouper",
    "SpatialGroups",
    "authority_color",
    "depth_color",
]
