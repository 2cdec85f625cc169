"""pyfloodsensors - Async client for Taiwan flood-depth sensor feeds."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfloodsensors")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfloodsensors.aggregator import Aggregator
from pyfloodsensors.cache import CacheStore, FileCacheStore, MemoryCacheStore, NullCacheStore
from pyfloodsensors.cancel import CancellationToken, RenderRun
from pyfloodsensors.client import FloodSensorsClient, acquire_sensor_data
from pyfloodsensors.config import FloodSensorsConfig
from pyfloodsensors.exceptions import (
    CacheCorruptError,
    FloodConfigError,
    FloodSensorsError,
    FloodTransportError,
    PageFetchError,
    SourceFetchError,
)
from pyfloodsensors.ingestion import RecordValidator
from pyfloodsensors.models import (
    AuthorityType,
    CacheEntry,
    FetchJob,
    MergedResult,
    ResultOrigin,
    SensorEntity,
    SensorStats,
    SourceFetchResult,
)
from pyfloodsensors.rendering import (
    BatchScheduler,
    DisplayOutcome,
    RenderSink,
    SensorDetail,
    SensorDisplay,
    SpatialGrouper,
    SpatialGroups,
    depth_color,
)

__all__ = [
    "__version__",
    "Aggregator",
    "AuthorityType",
    "BatchScheduler",
    "CacheCorruptError",
    "CacheEntry",
    "CacheStore",
    "CancellationToken",
    "DisplayOutcome",
    "FetchJob",
    "FileCacheStore",
    "FloodConfigError",
    "FloodSensorsClient",
    "FloodSensorsConfig",
    "FloodSensorsError",
    "FloodTransportError",
    "MemoryCacheStore",
    "MergedResult",
    "NullCacheStore",
    "PageFetchError",
    "RecordValidator",
    "RenderRun",
    "RenderSink",
    "ResultOrigin",
    "SensorDetail",
    "SensorDisplay",
    "SensorEntity",
    "SensorStats",
    "SourceFetchError",
    "SourceFetchResult",
    "SpatialGrouper",
    "SpatialGroups",
    "acquire_sensor_data",
    "depth_color",
]
