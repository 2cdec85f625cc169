"""TTL-bounded cache for the last successful merged result.

The cache is a performance optimization only. Reads that fail for any
reason are misses, and writes that fail are logged and dropped.

Two backends share one JSON serialization path:

* :class:`MemoryCacheStore` keeps the serialized entry in process memory.
* :class:`FileCacheStore` keeps it in a JSON file on this device.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pyfloodsensors._constants import CACHE_MAX_AGE_S
from pyfloodsensors.exceptions import CacheCorruptError
from pyfloodsensors.models.result import CacheEntry

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CacheStore(Protocol):
    """Interface the aggregator depends on."""

    def get(self) -> CacheEntry | None:
        ...

    def put(self, entry: CacheEntry) -> None:
        ...

    def clear(self) -> None:
        ...


class _SerializedCacheStore:
    """Shared TTL and error policy; subclasses only move strings around."""

    def __init__(
        self,
        *,
        max_age: timedelta = timedelta(seconds=CACHE_MAX_AGE_S),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._max_age = max_age
        self._clock = clock

    # -- backend hooks -------------------------------------------------

    def _read_raw(self) -> str | None:
        raise NotImplementedError

    def _write_raw(self, payload: str) -> None:
        raise NotImplementedError

    def _remove_raw(self) -> None:
        raise NotImplementedError

    # -- public API ----------------------------------------------------

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    def _load(self) -> CacheEntry | None:
        try:
            raw = self._read_raw()
        except OSError as exc:
            raise CacheCorruptError(f"cache read failed: {exc}") from exc
        if not raw:
            return None
        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as exc:
            raise CacheCorruptError(f"cache payload invalid ({exc.error_count()} error(s))") from exc
        if entry.stored_at.tzinfo is None:
            raise CacheCorruptError("cache timestamp has no timezone")
        return entry

    def get(self) -> CacheEntry | None:
        """Return the cached entry, or ``None`` when absent, expired or unreadable."""
        try:
            entry = self._load()
        except CacheCorruptError as exc:
            _logger.warning("Ignoring cache: %s", exc)
            return None
        if entry is None:
            return None

        age = self._clock() - entry.stored_at
        if age >= self._max_age:
            _logger.debug("Cache expired (%.0fs old)", age.total_seconds())
            self.clear()
            return None

        _logger.debug("Cache hit: %d sensor(s), %.0fs old", len(entry.entities), age.total_seconds())
        return entry

    def put(self, entry: CacheEntry) -> None:
        """Persist *entry*; failures are logged and never raised."""
        try:
            self._write_raw(entry.model_dump_json())
        except (OSError, ValueError, MemoryError) as exc:
            _logger.warning("Cache write failed, clearing cache: %s", exc)
            self.clear()
            return
        _logger.debug("Cached %d sensor(s)", len(entry.entities))

    def clear(self) -> None:
        try:
            self._remove_raw()
        except OSError as exc:
            _logger.warning("Cache clear failed: %s", exc)


class MemoryCacheStore(_SerializedCacheStore):
    """Cache kept in process memory.

    Entries are stored serialized so that reads go through the same
    validation as the file backend.
    """

    def __init__(
        self,
        *,
        max_age: timedelta = timedelta(seconds=CACHE_MAX_AGE_S),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(max_age=max_age, clock=clock)
        self._payload: str | None = None

    def _read_raw(self) -> str | None:
        return self._payload

    def _write_raw(self, payload: str) -> None:
        self._payload = payload

    def _remove_raw(self) -> None:
        self._payload = None


class FileCacheStore(_SerializedCacheStore):
    """Cache persisted to a single JSON file.

    Writes go to a temporary sibling and are renamed into place, so a crash
    mid-write leaves either the old entry or none.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        max_age: timedelta = timedelta(seconds=CACHE_MAX_AGE_S),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(max_age=max_age, clock=clock)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_raw(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise OSError(f"{self._path} is not UTF-8") from exc

    def _write_raw(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(f"{self._path.name}.tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, self._path)

    def _remove_raw(self) -> None:
        self._path.unlink(missing_ok=True)


class NullCacheStore:
    """Cache that never stores anything (``cache_enabled=False``)."""

    def get(self) -> CacheEntry | None:
        return None

    def put(self, entry: CacheEntry) -> None:
        return None

    def clear(self) -> None:
        return None

