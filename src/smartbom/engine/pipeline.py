"""EnrichmentPipeline: the single entry point exposed to calling layers.

Wires RetryExecutor, SupplierFanout, ComponentEnricher, BatchScheduler and
ResultAggregator around one EnrichmentClient::

    pipeline = EnrichmentPipeline(client, batch_size=3, batch_delay=2.0)
    result = await pipeline.run(components, requirements)

``run`` returns a PipelineResult (full or partial success) or raises
PipelineFailure when no component could be enriched.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Sequence

from smartbom.clients.base import EnrichmentClient
from smartbom.engine.aggregator import ResultAggregator
from smartbom.engine.cancellation import AsyncioClock, CancelToken, Clock
from smartbom.engine.enricher import ComponentEnricher
from smartbom.engine.fanout import DEFAULT_INTER_CALL_DELAY_S, SupplierFanout
from smartbom.engine.retry import DEFAULT_BASE_DELAY_S, DEFAULT_MAX_ATTEMPTS, RetryExecutor
from smartbom.engine.scheduler import DEFAULT_BATCH_DELAY_S, DEFAULT_BATCH_SIZE, BatchScheduler
from smartbom.models import Component, PipelineResult, Requirements

if TYPE_CHECKING:
    from smartbom.config import SmartBOMConfig

logger = logging.getLogger(__name__)


class EnrichmentPipeline:
    """Batched, retrying alternative and supplier enrichment.

    Args:
        client:              External enrichment client.
        max_attempts:        Attempts per client call (retry budget).
        base_retry_delay:    Base back-off delay in seconds.
        supplier_call_delay: Spacing between supplier lookups of one component.
        batch_size:          Components enriched concurrently.
        batch_delay:         Pacing delay between batches.
        clock:               Clock for every wait (virtual in tests).
    """

    def __init__(
        self,
        client: EnrichmentClient,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_retry_delay: float = DEFAULT_BASE_DELAY_S,
        supplier_call_delay: float = DEFAULT_INTER_CALL_DELAY_S,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay: float = DEFAULT_BATCH_DELAY_S,
        clock: Clock | None = None,
    ) -> None:
        self._clock = clock or AsyncioClock()
        retry = RetryExecutor(
            max_attempts=max_attempts,
            base_delay=base_retry_delay,
            clock=self._clock,
        )
        fanout = SupplierFanout(
            client,
            retry,
            inter_call_delay=supplier_call_delay,
            clock=self._clock,
        )
        self._client = client
        self._scheduler = BatchScheduler(
            ComponentEnricher(client, retry, fanout),
            batch_size=batch_size,
            batch_delay=batch_delay,
            clock=self._clock,
        )
        self._aggregator = ResultAggregator()

    @classmethod
    def from_config(
        cls,
        client: EnrichmentClient,
        config: "SmartBOMConfig",
        clock: Clock | None = None,
    ) -> "EnrichmentPipeline":
        """Build a pipeline using the engine settings of *config*."""
        return cls(
            client,
            max_attempts=config.max_attempts,
            base_retry_delay=config.base_retry_delay,
            supplier_call_delay=config.supplier_call_delay,
            batch_size=config.batch_size,
            batch_delay=config.batch_delay,
            clock=clock,
        )

    async def run(
        self,
        components: Sequence[Component],
        requirements: Requirements | None = None,
        token: CancelToken | None = None,
    ) -> PipelineResult:
        """Enrich *components* and return them in input order.

        Raises:
            PipelineFailure:   If every component failed.
            PipelineCancelled: If *token* was cancelled.
        """
        requirements = requirements or Requirements()
        started = self._clock.monotonic()
        logger.info("Starting enrichment of %d component(s)", len(components))

        outcomes = await self._scheduler.run(components, requirements, token)
        return self._aggregator.aggregate(
            outcomes,
            expected=len(components),
            elapsed_seconds=self._clock.monotonic() - started,
        )


def enrich_components(
    components: Sequence[Component],
    requirements: Requirements | None,
    client: EnrichmentClient,
    **options: object,
) -> PipelineResult:
    """Synchronous wrapper: run the pipeline on a fresh event loop.

    Keyword *options* are forwarded to :class:`EnrichmentPipeline`.
    """

    async def _run() -> PipelineResult:
        try:
            return await EnrichmentPipeline(client, **options).run(components, requirements)  # type: ignore[arg-type]
        finally:
            await client.aclose()

    return asyncio.run(_run())
