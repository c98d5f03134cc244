"""SmartBOM enrichment engine.

- :class:`EnrichmentPipeline` – entry point wiring every stage together
- :class:`BatchScheduler` – paced, fixed-size concurrent batches
- :class:`ComponentEnricher` – alternatives, then supplier fan-out
- :class:`SupplierFanout` – sequential supplier lookups per component
- :class:`RetryExecutor` – bounded exponential back-off
- :class:`ResultAggregator` – order restoration and run-status policy
"""

from smartbom.engine.aggregator import ResultAggregator, decide_run_status
from smartbom.engine.cancellation import AsyncioClock, CancelToken, Clock
from smartbom.engine.enricher import ComponentEnricher
from smartbom.engine.fanout import SupplierFanout, SupplierLookup
from smartbom.engine.outcome import ComponentOutcome, Failure, Success
from smartbom.engine.pipeline import EnrichmentPipeline, enrich_components
from smartbom.engine.retry import RetryExecutor
from smartbom.engine.scheduler import BatchScheduler

__all__ = [
    "AsyncioClock",
    "BatchScheduler",
    "CancelToken",
    "Clock",
    "ComponentEnricher",
    "ComponentOutcome",
    "EnrichmentPipeline",
    "Failure",
    "ResultAggregator",
    "RetryExecutor",
    "Success",
    "SupplierFanout",
    "SupplierLookup",
    "decide_run_status",
    "enrich_components",
]
