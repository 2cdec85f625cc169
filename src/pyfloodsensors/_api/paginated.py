"""Paginated, bounded-concurrency fetch of one SensorThings source.

Page 0 is requested alone to learn the total count; the remaining pages are
requested in sequential batches of ``concurrency_limit`` concurrent requests
with a short pause between batches. Every request has its own timeout. A
failed page contributes nothing instead of failing the job, and cancelling
the token returns whatever pages have already completed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

from pyfloodsensors._api.query import with_skip, with_top
from pyfloodsensors._constants import BATCH_PAUSE_S, CONCURRENCY_LIMIT, REQUEST_TIMEOUT_S, TOTAL_COUNT_KEYS
from pyfloodsensors._transport import Transport
from pyfloodsensors.cancel import CancellationToken
from pyfloodsensors.config import FloodSensorsConfig
from pyfloodsensors.exceptions import FloodTransportError, PageFetchError, SourceFetchError
from pyfloodsensors.ingestion.normalize import safe_float
from pyfloodsensors.models.fetch import FetchJob, SourceFetchResult

_logger = logging.getLogger(__name__)


def _total_count(payload: dict[str, Any]) -> int | None:
    for key in TOTAL_COUNT_KEYS:
        value = safe_float(payload.get(key))
        if value is not None and value > 0:
            return int(value)
    return None


async def _wait_or_abandon(tasks: Sequence[asyncio.Task[Any]], token: CancellationToken) -> bool:
    """Wait for *tasks* unless *token* fires first.

    Returns ``True`` when the token won; unfinished tasks are then cancelled
    and their results discarded. Finished tasks keep their results.
    """
    batch = asyncio.gather(*tasks, return_exceptions=True)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({batch, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        batch.cancel()
        raise
    finally:
        waiter.cancel()
    if batch.done():
        return False
    batch.cancel()
    return True


class PaginatedFetcher:
    """Retrieve every page of a :class:`FetchJob`, best effort."""

    def __init__(
        self,
        transport: Transport,
        *,
        concurrency_limit: int = CONCURRENCY_LIMIT,
        request_timeout: float = REQUEST_TIMEOUT_S,
        batch_pause: float = BATCH_PAUSE_S,
    ) -> None:
        if concurrency_limit <= 0:
            raise ValueError(f"concurrency_limit must be positive, got {concurrency_limit}")
        self._transport = transport
        self._concurrency_limit = concurrency_limit
        self._request_timeout = request_timeout
        self._batch_pause = batch_pause

    @classmethod
    def from_config(cls, transport: Transport, config: FloodSensorsConfig) -> PaginatedFetcher:
        return cls(
            transport,
            concurrency_limit=config.concurrency_limit,
            request_timeout=config.request_timeout,
            batch_pause=config.batch_pause,
        )

    async def _get_page(self, url: str, job: FetchJob, page: int) -> dict[str, Any]:
        """Fetch one page payload, raising :class:`PageFetchError` on any failure."""
        try:
            payload = await asyncio.wait_for(self._transport.get_json(url), timeout=self._request_timeout)
        except TimeoutError as exc:
            raise PageFetchError(
                f"{job.name} page {page} timed out after {self._request_timeout:g}s",
                source=job.name,
                page=page,
            ) from exc
        except FloodTransportError as exc:
            raise PageFetchError(f"{job.name} page {page} failed: {exc}", source=job.name, page=page) from exc
        except Exception as exc:
            _logger.debug("%s page %d: unexpected transport error", job.name, page, exc_info=True)
            raise PageFetchError(
                f"{job.name} page {page} failed: {type(exc).__name__}: {exc}",
                source=job.name,
                page=page,
            ) from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("value"), list):
            raise PageFetchError(f"{job.name} page {page} has no 'value' array", source=job.name, page=page)
        return payload

    async def _get_page_records(self, url: str, job: FetchJob, page: int) -> list[Any] | None:
        """Return the page's records, or ``None`` if the page failed."""
        try:
            payload = await self._get_page(url, job, page)
        except PageFetchError as exc:
            _logger.warning("%s", exc)
            return None
        return list(payload["value"])

    async def fetch(self, job: FetchJob, token: CancellationToken) -> SourceFetchResult:
        """Fetch all pages of *job*.

        Raises :class:`SourceFetchError` only when page 0 fails, since without
        it nothing is known about the source. Any later failure is absorbed.
        """
        started = time.monotonic()
        _logger.debug("%s: fetching page 0", job.name)

        if token.cancelled:
            return SourceFetchResult(job_name=job.name, cancelled=True)

        first_query = with_top(with_skip(job.base_query, 0), job.page_size)
        first_task = asyncio.ensure_future(self._get_page(first_query, job, 0))
        if await _wait_or_abandon([first_task], token):
            _logger.info("%s: cancelled before the first page completed", job.name)
            return SourceFetchResult(job_name=job.name, pages_requested=1, cancelled=True)

        try:
            first_payload = first_task.result()
        except PageFetchError as exc:
            raise SourceFetchError(str(exc), source=job.name) from exc

        records: list[Any] = list(first_payload["value"])
        total_count = _total_count(first_payload)
        if total_count is None:
            _logger.warning("%s: no total count reported, returning the first page only", job.name)
            return SourceFetchResult(job_name=job.name, records=tuple(records), pages_requested=1)

        total_pages = job.total_pages(total_count)
        _logger.debug("%s: total count %d across %d page(s)", job.name, total_count, total_pages)
        if total_pages == 1:
            return SourceFetchResult(
                job_name=job.name,
                records=tuple(records),
                total_count=total_count,
                pages_requested=1,
            )

        page_urls = [(page, with_skip(first_query, page * job.page_size)) for page in range(1, total_pages)]
        pages_requested = 1
        pages_failed = 0
        cancelled = False
        total_batches = -(-len(page_urls) // self._concurrency_limit)

        for batch_index, offset in enumerate(range(0, len(page_urls), self._concurrency_limit), start=1):
            if token.cancelled:
                cancelled = True
                break
            batch = page_urls[offset : offset + self._concurrency_limit]
            _logger.debug("%s: batch %d/%d (%d request(s))", job.name, batch_index, total_batches, len(batch))

            tasks = [asyncio.ensure_future(self._get_page_records(url, job, page)) for page, url in batch]
            pages_requested += len(tasks)
            cancelled = await _wait_or_abandon(tasks, token)

            for task in tasks:
                if not task.done() or task.cancelled():
                    continue
                page_records = task.result()
                if page_records is None:
                    pages_failed += 1
                else:
                    records.extend(page_records)

            if cancelled:
                break
            if offset + self._concurrency_limit < len(page_urls) and self._batch_pause > 0:
                await asyncio.sleep(self._batch_pause)

        elapsed_ms = (time.monotonic() - started) * 1000
        if cancelled:
            _logger.info("%s: cancelled, keeping %d record(s) already fetched", job.name, len(records))
        else:
            _logger.info(
                "%s: fetched %d record(s) from %d page(s) in %.0fms (%d failed)",
                job.name,
                len(records),
                total_pages,
                elapsed_ms,
                pages_failed,
            )
        return SourceFetchResult(
            job_name=job.name,
            records=tuple(records),
            total_count=total_count,
            pages_requested=pages_requested,
            pages_failed=pages_failed,
            cancelled=cancelled,
        )
