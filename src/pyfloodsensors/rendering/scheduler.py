"""Cooperative, cancellable batch rendering.

Rendering thousands of markers in one go would starve the event loop, so
entities are placed in slices with a yield to the loop between slices.
Detail payloads (popups) are attached in a second, separately cancellable
phase after a short delay, keeping them off the first-paint path.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from pyfloodsensors._constants import DETAIL_DELAY_S, RENDER_BATCH_SIZE
from pyfloodsensors.cancel import RenderRun
from pyfloodsensors.models.sensor import SensorEntity

_logger = logging.getLogger(__name__)


class RenderSink(Protocol):
    """Render target implemented by the UI layer (one per marker group)."""

    def clear(self) -> None:
        ...

    def begin_group(self) -> None:
        ...

    def place_marker(self, entity: SensorEntity) -> Any:
        ...

    def attach_detail(self, handle: Any, entity: SensorEntity) -> None:
        ...

    def end_group(self) -> None:
        ...


def call_sink_hook(hook: Callable[[], None], action: str) -> None:
    """Invoke a group-level sink hook, logging instead of raising on failure."""
    try:
        hook()
    except Exception:
        _logger.warning("Render sink failed to %s", action, exc_info=True)


@dataclass(slots=True)
class PlacedMarker:
    handle: Any
    entity: SensorEntity


@dataclass(slots=True)
class RenderReport:
    """What one :meth:`BatchScheduler.render` call managed to do."""

    bounds: list[tuple[float, float]] = field(default_factory=list)
    placed: int = 0
    detailed: int = 0
    failed: int = 0
    slices: int = 0
    cancelled: bool = False


class BatchScheduler:
    def __init__(self, *, batch_size: int = RENDER_BATCH_SIZE, detail_delay: float = DETAIL_DELAY_S) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._batch_size = batch_size
        self._detail_delay = detail_delay

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def place(
        self,
        entities: Sequence[SensorEntity],
        sink: RenderSink,
        run: RenderRun,
        report: RenderReport,
    ) -> list[PlacedMarker]:
        """Placement phase. Stops at the first slice boundary after *run* is cancelled."""
        placed: list[PlacedMarker] = []
        call_sink_hook(sink.begin_group, "begin a group")
        try:
            for start in range(0, len(entities), self._batch_size):
                if start:
                    await asyncio.sleep(0)
                if run.cancelled:
                    report.cancelled = True
                    break
                report.slices += 1
                for entity in entities[start : start + self._batch_size]:
                    try:
                        handle = sink.place_marker(entity)
                    except Exception:
                        report.failed += 1
                        _logger.warning("Placing marker for %s failed", entity.station_id, exc_info=True)
                        continue
                    placed.append(PlacedMarker(handle=handle, entity=entity))
                    report.bounds.append(entity.position)
        finally:
            call_sink_hook(sink.end_group, "end a group")
        report.placed = len(placed)
        return placed

    async def attach_details(
        self,
        placed: Sequence[PlacedMarker],
        sink: RenderSink,
        run: RenderRun,
        report: RenderReport,
    ) -> None:
        """Detail phase, sliced like placement and checked against *run* between slices."""
        if not placed:
            return
        if self._detail_delay > 0:
            await asyncio.sleep(self._detail_delay)
        for start in range(0, len(placed), self._batch_size):
            if start:
                await asyncio.sleep(0)
            if run.cancelled:
                report.cancelled = True
                return
            for marker in placed[start : start + self._batch_size]:
                try:
                    sink.attach_detail(marker.handle, marker.entity)
                except Exception:
                    report.failed += 1
                    _logger.warning("Attaching detail for %s failed", marker.entity.station_id, exc_info=True)
                    continue
                report.detailed += 1

    async def render(self, entities: Sequence[SensorEntity], sink: RenderSink, run: RenderRun) -> RenderReport:
        """Place every entity, then attach details. Resolves (never raises) on cancellation."""
        report = RenderReport()
        placed = await self.place(entities, sink, run, report)
        if not report.cancelled:
            await self.attach_details(placed, sink, run, report)
        if report.cancelled:
            _logger.debug("%r stopped after %d slice(s), %d marker(s) placed", run, report.slices, report.placed)
        return report

    def start(self, entities: Sequence[SensorEntity], sink: RenderSink, run: RenderRun) -> asyncio.Task[RenderReport]:
        """Schedule :meth:`render` as a task on the running loop."""
        return asyncio.ensure_future(self.render(entities, sink, run))
