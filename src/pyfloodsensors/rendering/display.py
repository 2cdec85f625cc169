"""Show a merged result: group, then render dense and sparse sets in parallel."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from pyfloodsensors.cancel import RenderRun
from pyfloodsensors.models._base import ResultOrigin
from pyfloodsensors.models.result import MergedResult, SensorStats
from pyfloodsensors.rendering.grouping import SpatialGrouper
from pyfloodsensors.rendering.scheduler import BatchScheduler, RenderSink, call_sink_hook

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DisplayOutcome:
    stats: SensorStats
    origin: ResultOrigin
    bounds: list[tuple[float, float]] = field(default_factory=list)
    dense_count: int = 0
    sparse_count: int = 0
    cancelled: bool = False
    empty: bool = False


class SensorDisplay:
    """Drives two render sinks: one clustered (dense) and one plain (sparse).

    Each :meth:`show` supersedes the previous one by cancelling its
    :class:`RenderRun` and clears both sinks before placing anything, so
    markers from an earlier run never pile up under the new ones.
    """

    def __init__(
        self,
        dense_sink: RenderSink,
        sparse_sink: RenderSink,
        *,
        scheduler: BatchScheduler | None = None,
        grouper: SpatialGrouper | None = None,
    ) -> None:
        self._dense_sink = dense_sink
        self._sparse_sink = sparse_sink
        self._scheduler = scheduler or BatchScheduler()
        self._grouper = grouper or SpatialGrouper()
        self._current_run: RenderRun | None = None

    def cancel(self) -> None:
        if self._current_run is not None:
            self._current_run.cancel()

    async def show(self, result: MergedResult) -> DisplayOutcome:
        self.cancel()
        run = RenderRun(label=f"{result.origin.value}@{result.produced_at.isoformat()}")
        self._current_run = run
        call_sink_hook(self._dense_sink.clear, "clear")
        call_sink_hook(self._sparse_sink.clear, "clear")

        if result.is_empty:
            _logger.warning("No sensors to display (origin=%s, error=%s)", result.origin.value, result.error)
            if self._current_run is run:
                self._current_run = None
            return DisplayOutcome(stats=result.stats, origin=result.origin, empty=True)

        groups = self._grouper.group(result.entities)
        try:
            dense_report, sparse_report = await asyncio.gather(
                self._scheduler.render(groups.dense, self._dense_sink, run),
                self._scheduler.render(groups.sparse, self._sparse_sink, run),
            )
        finally:
            if self._current_run is run:
                self._current_run = None

        outcome = DisplayOutcome(
            stats=result.stats,
            origin=result.origin,
            bounds=dense_report.bounds + sparse_report.bounds,
            dense_count=dense_report.placed,
            sparse_count=sparse_report.placed,
            cancelled=run.cancelled,
        )
        if outcome.cancelled:
            _logger.info("Display superseded after placing %d marker(s)", outcome.dense_count + outcome.sparse_count)
        else:
            _logger.info(
                "Displayed %d sensor(s) from %s (dense %d, sparse %d)",
                result.stats.total,
                result.origin.value,
                outcome.dense_count,
                outcome.sparse_count,
            )
        return outcome
