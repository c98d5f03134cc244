"""SupplierFanout: sequential supplier lookups for one component.

The entry list is ``[main, alt1, alt2, …]``.  Entries are processed strictly
one after another with a fixed spacing between calls so that a single
component never has more than one supplier request in flight.  A failing
entry is recorded as "no suppliers" with its error message; the remaining
entries are still processed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from smartbom.clients.base import EnrichmentClient
from smartbom.engine.cancellation import AsyncioClock, CancelToken, Clock
from smartbom.engine.retry import RetryExecutor
from smartbom.exceptions import PipelineCancelled, SupplierEntryFailure
from smartbom.models import BaselineAnalysis, Component, Requirements, SupplierOffer

logger = logging.getLogger(__name__)

DEFAULT_INTER_CALL_DELAY_S = 1.0


@dataclass(frozen=True)
class SupplierLookup:
    """Result of the supplier lookup for one fan-out entry.

    Attributes:
        offers:   Supplier offers found (empty on failure).
        baseline: Baseline analysis returned alongside the offers, if any.
        error:    Failure reason when the lookup failed, else ``None``.
    """

    offers: tuple[SupplierOffer, ...] = ()
    baseline: BaselineAnalysis | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SupplierFanout:
    """Obtains supplier offers for a component and its alternatives.

    Args:
        client:           Enrichment client used for ``find_suppliers``.
        retry:            Retry executor wrapping each lookup.
        inter_call_delay: Seconds to wait between consecutive entries.
        clock:            Clock used for the spacing waits.
    """

    def __init__(
        self,
        client: EnrichmentClient,
        retry: RetryExecutor,
        inter_call_delay: float = DEFAULT_INTER_CALL_DELAY_S,
        clock: Clock | None = None,
    ) -> None:
        self._client = client
        self._retry = retry
        self._inter_call_delay = inter_call_delay
        self._clock = clock or AsyncioClock()

    async def run(
        self,
        main: Component,
        alternatives: Sequence[Component],
        requirements: Requirements,
        token: CancelToken | None = None,
    ) -> dict[int, SupplierLookup]:
        """Look up suppliers for ``[main, *alternatives]`` in order.

        Returns:
            Mapping from entry position (0 = main component) to its lookup.

        Raises:
            PipelineCancelled: If *token* fires; no other error escapes.
        """
        entries: list[Component] = [main, *alternatives]
        results: dict[int, SupplierLookup] = {}

        for position, entry in enumerate(entries):
            try:
                results[position] = await self._lookup(position, entry, requirements, token)
            except SupplierEntryFailure as failure:
                logger.warning(
                    "No suppliers for %s (entry %d of %s): %s",
                    failure.entry_name, position, main.name, failure,
                )
                results[position] = SupplierLookup(error=str(failure))

            if position < len(entries) - 1:
                await self._clock.sleep(self._inter_call_delay, token)

        return results

    async def _lookup(
        self,
        position: int,
        entry: Component,
        requirements: Requirements,
        token: CancelToken | None,
    ) -> SupplierLookup:
        try:
            response = await self._retry.run(
                lambda: self._client.find_suppliers(entry, requirements),
                token=token,
                description=f"suppliers for {entry.name}",
            )
        except PipelineCancelled:
            raise
        except Exception as exc:
            raise SupplierEntryFailure(position, entry.name, exc) from exc

        logger.debug("Found %d supplier(s) for %s", len(response.alternative_suppliers), entry.name)
        return SupplierLookup(
            offers=tuple(response.alternative_suppliers),
            baseline=response.baseline_analysis,
        )
