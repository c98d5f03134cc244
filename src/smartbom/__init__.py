"""SmartBOM – alternative and supplier enrichment for procurement BOMs.

- :class:`~smartbom.engine.EnrichmentPipeline` – batched, retrying enrichment
- :class:`~smartbom.clients.EnrichmentClient` – research service interface
- :mod:`smartbom.models` – component, supplier and result models
"""

__version__ = "0.1.0"

from smartbom.clients import EnrichmentClient, LiteLLMEnrichmentClient, MockEnrichmentClient
from smartbom.engine import CancelToken, EnrichmentPipeline, enrich_components
from smartbom.exceptions import (
    ParseError,
    PipelineCancelled,
    PipelineFailure,
    ServiceError,
    SmartBOMError,
)
from smartbom.models import Component, EnrichedComponent, PipelineResult, Requirements

__all__ = [
    "CancelToken",
    "Component",
    "EnrichedComponent",
    "EnrichmentClient",
    "EnrichmentPipeline",
    "LiteLLMEnrichmentClient",
    "MockEnrichmentClient",
    "ParseError",
    "PipelineCancelled",
    "PipelineFailure",
    "PipelineResult",
    "Requirements",
    "ServiceError",
    "SmartBOMError",
    "__version__",
    "enrich_components",
]
