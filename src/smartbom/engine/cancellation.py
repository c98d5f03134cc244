"""Cooperative cancellation and scheduled sleeps for the enrichment engine.

Every wait in the engine (retry back-off, spacing between supplier lookups,
pacing between batches) goes through a :class:`Clock` so that:

- a :class:`CancelToken` can interrupt the wait immediately, and
- tests can substitute a virtual clock that records requested delays
  instead of sleeping in real time.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol, runtime_checkable

from smartbom.exceptions import PipelineCancelled

logger = logging.getLogger(__name__)


class CancelToken:
    """Cancellation signal shared by every task of one pipeline run.

    Example::

        token = CancelToken()
        task = asyncio.create_task(pipeline.run(components, reqs, token=token))
        ...
        token.cancel("user aborted")
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation.  Idempotent; the first reason wins."""
        if not self._event.is_set():
            self._reason = reason
            logger.info("Cancellation requested: %s", reason)
            self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`PipelineCancelled` if cancellation was requested."""
        if self._event.is_set():
            raise PipelineCancelled(f"Pipeline cancelled: {self._reason}")

    async def wait(self, timeout: float) -> bool:
        """Wait up to *timeout* seconds for cancellation.

        Returns:
            ``True`` if the token was cancelled during (or before) the wait,
            ``False`` if the timeout elapsed first.
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True


@runtime_checkable
class Clock(Protocol):
    """Source of time and cancellable sleeps used by the engine."""

    def monotonic(self) -> float:
        """Return a monotonic timestamp in seconds."""
        ...

    async def sleep(self, seconds: float, token: CancelToken | None = None) -> None:
        """Sleep for *seconds*; raise PipelineCancelled if *token* fires."""
        ...


class AsyncioClock:
    """Real-time :class:`Clock` backed by the running event loop."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float, token: CancelToken | None = None) -> None:
        if token is None:
            await asyncio.sleep(seconds)
            return
        token.raise_if_cancelled()
        if seconds <= 0:
            return
        if await token.wait(seconds):
            token.raise_if_cancelled()
