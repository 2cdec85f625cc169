from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pytest

from fakes import make_entity
from pyfloodsensors.models import MergedResult, ResultOrigin, SensorEntity
from pyfloodsensors.rendering import BatchScheduler, SensorDetail, SensorDisplay


@dataclass
class MapLayer:
    """Sink that records markers and their popup payloads."""

    markers: list[SensorEntity] = field(default_factory=list)
    details: list[SensorDetail] = field(default_factory=list)
    groups: int = 0
    clears: int = 0

    def clear(self) -> None:
        self.clears += 1
        self.markers.clear()
        self.details.clear()

    def begin_group(self) -> None:
        self.groups += 1

    def place_marker(self, entity: SensorEntity) -> Any:
        self.markers.append(entity)
        return len(self.markers) - 1

    def attach_detail(self, handle: Any, entity: SensorEntity) -> None:
        assert self.markers[handle] is entity
        self.details.append(SensorDetail.from_entity(entity))

    def end_group(self) -> None:
        pass


def _result(entities: list[SensorEntity], origin: ResultOrigin = ResultOrigin.LIVE) -> MergedResult:
    return MergedResult(entities=tuple(entities), produced_at=datetime(2026, 1, 1, tzinfo=UTC), origin=origin)


def _sample() -> list[SensorEntity]:
    crowded = [make_entity(25.0 + i * 0.0001, 121.5, station_id=f"d{i}") for i in range(10)]
    scattered = [make_entity(22.0 + i * 0.1, 120.5, station_id=f"s{i}") for i in range(4)]
    return crowded + scattered


@pytest.mark.asyncio
async def test_show_renders_dense_and_sparse_into_their_sinks() -> None:
    dense, sparse = MapLayer(), MapLayer()
    display = SensorDisplay(dense, sparse, scheduler=BatchScheduler(detail_delay=0))

    outcome = await display.show(_result(_sample(), ResultOrigin.CACHE))

    assert [e.station_id for e in dense.markers] == [f"d{i}" for i in range(10)]
    assert [e.station_id for e in sparse.markers] == [f"s{i}" for i in range(4)]
    assert len(dense.details) == 10
    assert len(sparse.details) == 4
    assert outcome.dense_count == 10
    assert outcome.sparse_count == 4
    assert outcome.stats.total == 14
    assert outcome.origin is ResultOrigin.CACHE
    assert len(outcome.bounds) == 14
    assert not outcome.cancelled
    assert not outcome.empty


@pytest.mark.asyncio
async def test_empty_result_short_circuits() -> None:
    dense, sparse = MapLayer(), MapLayer()
    display = SensorDisplay(dense, sparse)

    outcome = await display.show(MergedResult.empty(error="all sources failed"))

    assert outcome.empty
    assert outcome.stats.total == 0
    assert dense.clears == sparse.clears == 1
    assert dense.groups == 0
    assert sparse.groups == 0


@pytest.mark.asyncio
async def test_new_show_cancels_previous_render() -> None:
    dense, sparse = MapLayer(), MapLayer()
    display = SensorDisplay(dense, sparse, scheduler=BatchScheduler(batch_size=1, detail_delay=0))
    many = [make_entity(22.0 + i * 0.05, 120.5, station_id=f"m{i}") for i in range(50)]

    first = asyncio.ensure_future(display.show(_result(many)))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    second = await display.show(_result(_sample()))
    first_outcome = await first

    assert first_outcome.cancelled
    assert first_outcome.sparse_count < 50
    assert not second.cancelled
    assert second.dense_count == 10
    assert [e.station_id for e in sparse.markers] == [f"s{i}" for i in range(4)]
    assert len(dense.markers) == 10


@pytest.mark.asyncio
async def test_cancel_stops_current_render() -> None:
    dense, sparse = MapLayer(), MapLayer()
    display = SensorDisplay(dense, sparse, scheduler=BatchScheduler(detail_delay=0.05))

    task = asyncio.ensure_future(display.show(_result(_sample())))
    await asyncio.sleep(0.01)
    display.cancel()
    outcome = await task

    assert outcome.cancelled
    assert outcome.dense_count + outcome.sparse_count == 14
    assert dense.details == []
    assert sparse.details == []


@pytest.mark.asyncio
async def test_show_replaces_markers_from_previous_show() -> None:
    dense, sparse = MapLayer(), MapLayer()
    display = SensorDisplay(dense, sparse, scheduler=BatchScheduler(detail_delay=0))

    await display.show(_result(_sample()))
    await display.show(_result(_sample()[10:]))

    assert dense.markers == []
    assert [e.station_id for e in sparse.markers] == [f"s{i}" for i in range(4)]
    assert dense.clears == sparse.clears == 2


@pytest.mark.asyncio
async def test_failing_clear_still_renders() -> None:
    class DetachedLayer(MapLayer):
        def clear(self) -> None:
            raise RuntimeError("layer detached")

    dense, sparse = DetachedLayer(), MapLayer()
    display = SensorDisplay(dense, sparse, scheduler=BatchScheduler(detail_delay=0))

    outcome = await display.show(_result(_sample()))

    assert outcome.dense_count == 10
    assert outcome.sparse_count == 4
