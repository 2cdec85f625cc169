"""Custom exception hierarchy for pyfloodsensors."""

from __future__ import annotations


class FloodSensorsError(Exception):
    """Base exception for all pyfloodsensors errors."""


class FloodConfigError(FloodSensorsError):
    """Invalid or missing configuration."""


class FloodTransportError(FloodSensorsError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class PageFetchError(FloodSensorsError):
    """A single page of a source could not be fetched (timeout or bad response).

    The fetcher substitutes an empty page; this is raised internally and
    logged, never propagated to callers.
    """

    def __init__(self, message: str, *, source: str = "", page: int = 0) -> None:
        self.source = source
        self.page = page
        super().__init__(message)


class SourceFetchError(FloodSensorsError):
    """A whole source was unreachable (its first page failed)."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class CacheCorruptError(FloodSensorsError):
    """Stored cache payload could not be read or parsed.

    Cache stores treat this exactly like a miss.
    """
