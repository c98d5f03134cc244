"""Per-component outcome values produced by ComponentEnricher.

Each input component yields exactly one outcome:

- :class:`Success` carries the fully enriched component.
- :class:`Failure` carries the component name and the error message.

Frozen dataclasses (not Pydantic) because outcomes are in-memory values
that exist only between the enrich tasks and the aggregator.  Consumers
dispatch with ``match`` and close with ``assert_never`` so a new variant
cannot be silently ignored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from smartbom.models import EnrichedComponent


@dataclass(frozen=True)
class Success:
    """Component *index* was enriched."""

    index: int
    component: "EnrichedComponent"

    @property
    def component_name(self) -> str:
        return self.component.name


@dataclass(frozen=True)
class Failure:
    """Component *index* could not be enriched.

    Attributes:
        index:          Position of the component in the input list.
        component_name: Name of the component (for reporting).
        error:          Message of the error that ended its enrichment.
    """

    index: int
    component_name: str
    error: str


ComponentOutcome = Union[Success, Failure]
