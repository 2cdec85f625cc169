"""Grid bucketing of sensors into dense (clustered) and sparse (direct) sets."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from pyfloodsensors._constants import DENSE_BUCKET_THRESHOLD, GRID_SIZE
from pyfloodsensors.models.sensor import SensorEntity

_logger = logging.getLogger(__name__)


def _grid_index(value: float, grid_size: float) -> int:
    # Half-up rounding; round() would send .5 to the even neighbour.
    return math.floor(value / grid_size + 0.5)


@dataclass(frozen=True, slots=True)
class SpatialGroups:
    dense: tuple[SensorEntity, ...]
    sparse: tuple[SensorEntity, ...]
    bucket_count: int = 0
    dense_bucket_count: int = 0


class SpatialGrouper:
    """Partition sensors by how crowded their grid cell is.

    A cell with at least ``dense_threshold`` sensors sends all of them to
    ``dense``; every other sensor goes to ``sparse``. Input order is kept
    within each cell and cells are emitted in first-seen order.
    """

    def __init__(self, *, grid_size: float = GRID_SIZE, dense_threshold: int = DENSE_BUCKET_THRESHOLD) -> None:
        if grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {grid_size}")
        if dense_threshold < 1:
            raise ValueError(f"dense_threshold must be at least 1, got {dense_threshold}")
        self._grid_size = grid_size
        self._dense_threshold = dense_threshold

    def _resolve_grid_size(self, grid_size: float | None) -> float:
        if grid_size is None:
            return self._grid_size
        if grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {grid_size}")
        return grid_size

    def bucket_key(self, entity: SensorEntity, grid_size: float | None = None) -> tuple[int, int]:
        grid_size = self._resolve_grid_size(grid_size)
        return (_grid_index(entity.latitude, grid_size), _grid_index(entity.longitude, grid_size))

    def group(self, entities: Iterable[SensorEntity], grid_size: float | None = None) -> SpatialGroups:
        """Bucket *entities*; *grid_size* overrides the configured cell size in degrees."""
        grid_size = self._resolve_grid_size(grid_size)
        buckets: dict[tuple[int, int], list[SensorEntity]] = {}
        for entity in entities:
            buckets.setdefault(self.bucket_key(entity, grid_size), []).append(entity)

        dense: list[SensorEntity] = []
        sparse: list[SensorEntity] = []
        dense_buckets = 0
        for members in buckets.values():
            if len(members) >= self._dense_threshold:
                dense.extend(members)
                dense_buckets += 1
            else:
                sparse.extend(members)

        _logger.debug(
            "Grouped %d sensor(s) into %d cell(s): %d dense in %d cell(s), %d sparse",
            len(dense) + len(sparse),
            len(buckets),
            len(dense),
            dense_buckets,
            len(sparse),
        )
        return SpatialGroups(
            dense=tuple(dense),
            sparse=tuple(sparse),
            bucket_count=len(buckets),
            dense_bucket_count=dense_buckets,
        )
