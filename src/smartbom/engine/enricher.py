"""ComponentEnricher: two-stage enrichment of a single component.

Stages:
1. Alternative discovery (retry-wrapped).  Failure here ends the component
   with a :class:`Failure` outcome; no supplier lookups are attempted.
2. Supplier fan-out over ``[component, *alternatives]``.  Entry failures
   degrade to empty supplier lists and never fail the component.

The enricher never raises for a component-level problem: errors become
outcome values so that a failing component cannot cancel its batch
siblings.  Only :class:`PipelineCancelled` escapes.
"""
from __future__ import annotations

import logging
from typing import Sequence

from smartbom.clients.base import EnrichmentClient
from smartbom.engine.cancellation import CancelToken
from smartbom.engine.fanout import SupplierFanout, SupplierLookup
from smartbom.engine.outcome import ComponentOutcome, Failure, Success
from smartbom.engine.retry import RetryExecutor
from smartbom.exceptions import ComponentFailure, PipelineCancelled
from smartbom.models import (
    DEFAULT_RECOMMENDATION,
    MAX_ALTERNATIVES,
    AlternativeComponent,
    Component,
    EnrichedAlternative,
    EnrichedComponent,
    Requirements,
)

logger = logging.getLogger(__name__)


def recommendation_reason(alternative: AlternativeComponent) -> str:
    """Join an alternative's advantages into a single recommendation line."""
    advantages = [a for a in alternative.key_advantages if a]
    return "; ".join(advantages) if advantages else DEFAULT_RECOMMENDATION


class ComponentEnricher:
    """Produces exactly one outcome per component.

    Args:
        client: Enrichment client used for alternative discovery.
        retry:  Retry executor wrapping the alternative discovery call.
        fanout: Supplier fan-out for the component and its alternatives.
    """

    def __init__(
        self,
        client: EnrichmentClient,
        retry: RetryExecutor,
        fanout: SupplierFanout,
    ) -> None:
        self._client = client
        self._retry = retry
        self._fanout = fanout

    async def enrich(
        self,
        index: int,
        component: Component,
        requirements: Requirements,
        token: CancelToken | None = None,
        total: int | None = None,
    ) -> ComponentOutcome:
        """Enrich *component* (input position *index*).

        Returns:
            ``Success`` with the enriched component, or ``Failure`` naming
            the component and the error that stopped it.

        Raises:
            PipelineCancelled: If *token* fires during enrichment.
        """
        progress = f"{index + 1}/{total}" if total else f"#{index + 1}"
        logger.info("Processing component %s: %s", progress, component.name)
        try:
            enriched = await self._enrich(index, component, requirements, token)
        except PipelineCancelled:
            raise
        except ComponentFailure as failure:
            logger.error("Component %s (%s) failed: %s", progress, component.name, failure)
            return Failure(index=index, component_name=component.name, error=str(failure))
        except Exception as exc:
            logger.exception("Unexpected error enriching component %s (%s)", progress, component.name)
            return Failure(index=index, component_name=component.name, error=str(exc) or type(exc).__name__)

        logger.info(
            "Completed component %s: %s (%d alternative(s), %d supplier(s))",
            progress, component.name, len(enriched.alternatives), len(enriched.suppliers),
        )
        return Success(index=index, component=enriched)

    async def _enrich(
        self,
        index: int,
        component: Component,
        requirements: Requirements,
        token: CancelToken | None,
    ) -> EnrichedComponent:
        alternatives = await self._discover_alternatives(index, component, requirements, token)
        # Alternatives inherit the main component's quantity for supplier quotes.
        sized = [alt.model_copy(update={"quantity": component.quantity}) for alt in alternatives]
        lookups = await self._fanout.run(component, sized, requirements, token)
        return self._assemble(component, sized, lookups)

    async def _discover_alternatives(
        self,
        index: int,
        component: Component,
        requirements: Requirements,
        token: CancelToken | None,
    ) -> list[AlternativeComponent]:
        try:
            response = await self._retry.run(
                lambda: self._client.find_alternatives(component, requirements),
                token=token,
                description=f"alternatives for {component.name}",
            )
        except PipelineCancelled:
            raise
        except Exception as exc:
            raise ComponentFailure(component.name, index, exc) from exc

        found = list(response.alternatives)
        if len(found) > MAX_ALTERNATIVES:
            logger.debug(
                "Discarding %d extra alternative(s) for %s",
                len(found) - MAX_ALTERNATIVES, component.name,
            )
        return found[:MAX_ALTERNATIVES]

    @staticmethod
    def _assemble(
        component: Component,
        alternatives: Sequence[AlternativeComponent],
        lookups: dict[int, SupplierLookup],
    ) -> EnrichedComponent:
        main = lookups[0]
        enriched_alternatives = []
        for number, alternative in enumerate(alternatives, start=1):
            lookup = lookups[number]
            enriched_alternatives.append(
                EnrichedAlternative(
                    **alternative.model_dump(),
                    id=alternative.part_number or f"{component.name}-alt-{number}",
                    recommendation_reason=recommendation_reason(alternative),
                    suppliers=list(lookup.offers),
                    supplier_error=lookup.error,
                )
            )

        return EnrichedComponent(
            **component.model_dump(),
            suppliers=list(main.offers),
            supplier_error=main.error,
            baseline_analysis=main.baseline,
            alternatives=enriched_alternatives,
        )
