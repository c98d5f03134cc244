"""Data models for the SmartBOM enrichment pipeline.

Wire-facing models accept both the camelCase keys returned by the upstream
research service (``partNumber``, ``keyAdvantages``, ``landedCostINR`` …)
and snake_case field names.  They serialise by alias so that enriched
output keeps the upstream shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Alternatives kept per component; extras returned upstream are discarded.
MAX_ALTERNATIVES = 2

#: Fallback recommendation text for alternatives without listed advantages.
DEFAULT_RECOMMENDATION = "Alternative component"

#: Supplier classification codes (1-10) relative to the baseline component.
SUPPLIER_CLASSIFICATIONS: dict[int, str] = {
    1: "Better Quality but similar price",
    2: "Better Quality but lower price",
    3: "Better Quality but higher price",
    4: "Better Quality, higher price and higher reliability",
    5: "Better Quality, lower price and more established company",
    6: "Better Quality, higher price and a more established company",
    7: "Better Quality, lower price and better support",
    8: "Better Quality, higher price and better support",
    9: "Better Quality, lower price and better returns and warranty support",
    10: "Better Quality, higher price and better returns and warranty support",
}


class _WireModel(BaseModel):
    """Shared configuration for models exchanged with the research service."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class Component(_WireModel):
    """One procurement line item to enrich."""

    name: str = Field(..., min_length=1, description="Component name")
    part_number: Optional[str] = Field(
        default=None, alias="partNumber", description="Manufacturer part number"
    )
    description: str = Field(default="", description="Free-text description")
    specifications: str = Field(default="", description="Key specifications")
    quantity: int = Field(default=1, ge=1, description="Units required")


class Requirements(_WireModel):
    """Sourcing requirements shared by every enrichment call of a run."""

    sourcing_location: Optional[str] = Field(default=None, alias="sourcingLocation")
    compliance_requirements: list[str] = Field(
        default_factory=list, alias="complianceRequirements"
    )
    supplier_priority: list[str] = Field(default_factory=list, alias="supplierPriority")
    desired_lead_time: Optional[str] = Field(default=None, alias="desiredLeadTime")


# ---------------------------------------------------------------------------
# Alternative discovery
# ---------------------------------------------------------------------------


class AlternativeComponent(Component):
    """A functionally equivalent substitute suggested for a component."""

    cost_range: str = Field(default="", alias="costRange")
    key_advantages: list[str] = Field(default_factory=list, alias="keyAdvantages")
    potential_drawbacks: list[str] = Field(
        default_factory=list, alias="potentialDrawbacks"
    )


class AlternativesResponse(_WireModel):
    """Parsed body of a ``find_alternatives`` call."""

    alternatives: list[AlternativeComponent] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Supplier discovery
# ---------------------------------------------------------------------------


class LandedCost(_WireModel):
    """Landed cost breakdown for one supplier offer."""

    local_currency_price: Optional[float] = Field(default=None, alias="localCurrencyPrice")
    exchange_rate_used: Optional[float] = Field(default=None, alias="exchangeRateUsed")
    estimated_shipping: Optional[float] = Field(default=None, alias="estimatedShippingINR")
    estimated_customs: Optional[float] = Field(default=None, alias="estimatedCustomsINR")
    total_landed_cost: Optional[float] = Field(default=None, alias="totalLandedCostINR")


class BaselineAnalysis(_WireModel):
    """Reference price and specifications established for the searched part."""

    primary_category: Optional[str] = Field(default=None, alias="primaryCategory")
    manufacturer: Optional[str] = None
    key_specifications: Optional[str] = Field(default=None, alias="keySpecifications")
    baseline_price: Optional[float] = Field(default=None, alias="baselinePriceINR")
    source_url: Optional[str] = Field(default=None, alias="sourceURL")
    product_page_url: Optional[str] = Field(default=None, alias="productPageURL")


class SupplierOffer(_WireModel):
    """One vendor's quote for a component or alternative."""

    supplier_name: str = Field(..., min_length=1, alias="supplierName")
    country: Optional[str] = None
    classification: Optional[int] = Field(default=None, ge=1, le=10)
    supplier_url: Optional[str] = Field(default=None, alias="supplierURL")
    product_page_url: Optional[str] = Field(default=None, alias="productPageURL")
    manufacturer: Optional[str] = None
    key_specifications: Optional[str] = Field(default=None, alias="keySpecifications")
    landed_cost: Optional[LandedCost] = Field(default=None, alias="landedCostINR")
    lead_time: Optional[str] = Field(default=None, alias="leadTime")
    reliability_notes: Optional[str] = Field(default=None, alias="reliabilityNotes")
    better_in_which_ways: Optional[str] = Field(
        default=None, alias="alternativeBetterInWhichWays"
    )

    @property
    def classification_label(self) -> str | None:
        """Human-readable meaning of :attr:`classification`."""
        if self.classification is None:
            return None
        return SUPPLIER_CLASSIFICATIONS.get(self.classification)


class SupplierResponse(_WireModel):
    """Parsed body of a ``find_suppliers`` call."""

    baseline_analysis: Optional[BaselineAnalysis] = Field(
        default=None, alias="baselineAnalysis"
    )
    alternative_suppliers: list[SupplierOffer] = Field(
        default_factory=list, alias="alternativeSuppliers"
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class EnrichedAlternative(AlternativeComponent):
    """An alternative together with its own supplier offers."""

    id: str
    recommendation_reason: str = Field(
        default=DEFAULT_RECOMMENDATION, alias="recommendationReason"
    )
    suppliers: list[SupplierOffer] = Field(default_factory=list)
    supplier_error: Optional[str] = Field(default=None, alias="supplierError")


class EnrichedComponent(Component):
    """A fully enriched input component (the pipeline's output unit)."""

    suppliers: list[SupplierOffer] = Field(default_factory=list)
    supplier_error: Optional[str] = Field(default=None, alias="supplierError")
    baseline_analysis: Optional[BaselineAnalysis] = Field(
        default=None, alias="baselineAnalysis"
    )
    alternatives: list[EnrichedAlternative] = Field(default_factory=list)

    def lowest_landed_cost(self) -> float | None:
        """Return the cheapest ``total_landed_cost`` among main-component offers."""
        costs = [
            offer.landed_cost.total_landed_cost
            for offer in self.suppliers
            if offer.landed_cost is not None
            and offer.landed_cost.total_landed_cost is not None
        ]
        return min(costs) if costs else None


class RunStatus(str, Enum):
    """Overall result of a pipeline run that did not raise."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"


class FailureRecord(_WireModel):
    """Descriptor of one component whose enrichment failed."""

    index: int = Field(..., ge=0)
    component_name: str = Field(..., alias="componentName")
    error: str

    def describe(self) -> str:
        return f'Component "{self.component_name}": {self.error}'


class PipelineSummary(_WireModel):
    """Counts and timings for a completed run."""

    status: RunStatus
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    alternatives: int = 0
    supplier_offers: int = Field(default=0, alias="supplierOffers")
    supplier_entry_failures: int = Field(default=0, alias="supplierEntryFailures")
    elapsed_seconds: float = Field(default=0.0, alias="elapsedSeconds")
    estimated_total_value: float = Field(default=0.0, alias="estimatedTotalValue")


class PipelineResult(_WireModel):
    """Ordered enriched components plus the failure log of one run."""

    components: list[EnrichedComponent] = Field(default_factory=list)
    failures: list[FailureRecord] = Field(default_factory=list)
    summary: PipelineSummary

    @property
    def is_partial(self) -> bool:
        return self.summary.status == RunStatus.PARTIAL_SUCCESS
