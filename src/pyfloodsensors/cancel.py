"""Explicit cancellation values.

A :class:`CancellationToken` is created per aggregation run and passed down
to the fetchers; a :class:`RenderRun` is created per display request and
passed to the batch scheduler. Nothing here is global.
"""

from __future__ import annotations

import asyncio


class CancellationToken:
    """One-shot cooperative cancellation signal for a fetch pipeline run."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent; a token is never reset."""
        self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()


class RenderRun:
    """Cancellation flag for one display request.

    The batch scheduler polls :attr:`cancelled` between slices, so
    cancelling never interrupts a slice already in progress.
    """

    __slots__ = ("_cancelled", "label")

    def __init__(self, label: str = "") -> None:
        self.label = label
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        return f"RenderRun(label={self.label!r}, cancelled={self._cancelled})"
