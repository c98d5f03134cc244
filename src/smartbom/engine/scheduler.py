"""BatchScheduler: bounded-concurrency execution of ComponentEnricher tasks.

The component list is split into contiguous batches of ``batch_size``.  All
tasks of a batch are started together inside an ``asyncio.TaskGroup`` and
the scheduler waits for every one of them before pacing into the next batch.

Outcomes are read from the task handles only after the group has exited
(collect-after-await), so no lock guards the result list.  Component errors
are outcome values, never exceptions, so one failing component cannot
cancel its siblings; the only exception that tears a batch down is
:class:`PipelineCancelled`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from smartbom.engine.cancellation import AsyncioClock, CancelToken, Clock
from smartbom.engine.enricher import ComponentEnricher
from smartbom.engine.outcome import ComponentOutcome
from smartbom.exceptions import ConfigurationError, PipelineCancelled
from smartbom.models import Component, Requirements

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY_S = 2.0


def partition(items: Sequence[Component], size: int) -> list[list[tuple[int, Component]]]:
    """Split *items* into ``ceil(len/size)`` ordered batches of (index, item)."""
    indexed = list(enumerate(items))
    return [indexed[start : start + size] for start in range(0, len(indexed), size)]


class BatchScheduler:
    """Runs enrichment in paced, fixed-size concurrent batches.

    Args:
        enricher:    Enricher invoked once per component.
        batch_size:  Maximum number of components enriched concurrently.
        batch_delay: Seconds to wait between the end of one batch and the
                     start of the next.
        clock:       Clock used for the pacing wait.
    """

    def __init__(
        self,
        enricher: ComponentEnricher,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY_S,
        clock: Clock | None = None,
    ) -> None:
        if batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")
        if batch_delay < 0:
            raise ConfigurationError(f"batch_delay must be >= 0, got {batch_delay}")
        self._enricher = enricher
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._clock = clock or AsyncioClock()

    async def run(
        self,
        components: Sequence[Component],
        requirements: Requirements,
        token: CancelToken | None = None,
    ) -> list[ComponentOutcome]:
        """Enrich every component and return one outcome per component.

        Outcomes are returned in batch order; within a batch their order is
        the task launch order.  Callers must not rely on either: the
        aggregator restores input order from ``outcome.index``.

        Raises:
            PipelineCancelled: If *token* fires.  ``outcomes`` on the error
                holds the outcomes of every batch that completed.
        """
        batches = partition(components, self.batch_size)
        total = len(components)
        outcomes: list[ComponentOutcome] = []
        logger.info(
            "Enriching %d component(s) in %d batch(es) of up to %d",
            total, len(batches), self.batch_size,
        )

        completed = 0
        for number, batch in enumerate(batches, start=1):
            try:
                if token is not None:
                    token.raise_if_cancelled()
                logger.info("Starting batch %d/%d (%d component(s))", number, len(batches), len(batch))
                outcomes.extend(await self._run_batch(batch, requirements, token, total))
                completed = number
                if number < len(batches):
                    await self._clock.sleep(self.batch_delay, token)
            except PipelineCancelled as exc:
                logger.warning("Stopping after %d of %d batch(es): %s", completed, len(batches), exc)
                raise PipelineCancelled(str(exc), outcomes=outcomes) from exc

        return outcomes

    async def _run_batch(
        self,
        batch: list[tuple[int, Component]],
        requirements: Requirements,
        token: CancelToken | None,
        total: int,
    ) -> list[ComponentOutcome]:
        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [
                    tg.create_task(
                        self._enricher.enrich(index, component, requirements, token, total),
                        name=f"enrich-{index}",
                    )
                    for index, component in batch
                ]
        except ExceptionGroup as group:
            cancelled, rest = group.split(PipelineCancelled)
            if cancelled is not None and rest is None:
                raise cancelled.exceptions[0] from None
            raise

        return [task.result() for task in tasks]
