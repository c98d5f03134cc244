"""ResultAggregator: turns per-component outcomes into a PipelineResult.

This is the only place input order is restored: successes are sorted by
their original index, never by completion order.

Run-status policy (:func:`decide_run_status`):

=========  ==========  =============================================
failures   successes   result
=========  ==========  =============================================
none       any         SUCCESS: all components returned
some       some        PARTIAL_SUCCESS: successes + failure records
some       none        raise PipelineFailure listing every failure
=========  ==========  =============================================
"""
from __future__ import annotations

import logging
from typing import Sequence, assert_never

from smartbom.engine.outcome import ComponentOutcome, Failure, Success
from smartbom.exceptions import OutcomeInvariantError, PipelineFailure
from smartbom.models import FailureRecord, PipelineResult, PipelineSummary, RunStatus

logger = logging.getLogger(__name__)


def decide_run_status(succeeded: int, failed: int) -> RunStatus | None:
    """Apply the run-status policy.

    Returns:
        The run status, or ``None`` when the run as a whole has failed
        (failures present and nothing succeeded).
    """
    if failed and not succeeded:
        return None
    if failed:
        return RunStatus.PARTIAL_SUCCESS
    return RunStatus.SUCCESS


class ResultAggregator:
    """Collects outcomes and applies the run-status policy."""

    def aggregate(
        self,
        outcomes: Sequence[ComponentOutcome],
        expected: int | None = None,
        elapsed_seconds: float = 0.0,
    ) -> PipelineResult:
        """Build the PipelineResult for *outcomes*.

        Args:
            outcomes:        One outcome per component, in any order.
            expected:        Number of input components; when given, the
                             outcome indices must be exactly ``0..expected-1``.
            elapsed_seconds: Wall time of the run, copied into the summary.

        Raises:
            PipelineFailure:       If every component failed.
            OutcomeInvariantError: If an index is duplicated or missing.
        """
        self._check_coverage(outcomes, expected)

        successes: list[Success] = []
        failures: list[Failure] = []
        for outcome in outcomes:
            match outcome:
                case Success():
                    successes.append(outcome)
                case Failure():
                    failures.append(outcome)
                case _:
                    assert_never(outcome)

        successes.sort(key=lambda s: s.index)
        failures.sort(key=lambda f: f.index)
        records = [
            FailureRecord(index=f.index, component_name=f.component_name, error=f.error)
            for f in failures
        ]

        status = decide_run_status(len(successes), len(failures))
        if status is None:
            logger.error("All %d component(s) failed", len(failures))
            raise PipelineFailure(records)

        components = [s.component for s in successes]
        if failures:
            logger.warning(
                "%d component(s) failed; continuing with %d enriched component(s)",
                len(failures), len(successes),
            )
            for record in records:
                logger.warning("  %s", record.describe())

        supplier_entry_failures = sum(
            (c.supplier_error is not None) + sum(a.supplier_error is not None for a in c.alternatives)
            for c in components
        )
        summary = PipelineSummary(
            status=status,
            total=len(outcomes),
            succeeded=len(successes),
            failed=len(failures),
            alternatives=sum(len(c.alternatives) for c in components),
            supplier_offers=sum(
                len(c.suppliers) + sum(len(a.suppliers) for a in c.alternatives)
                for c in components
            ),
            supplier_entry_failures=supplier_entry_failures,
            elapsed_seconds=elapsed_seconds,
            estimated_total_value=sum(
                (c.lowest_landed_cost() or 0.0) * c.quantity for c in components
            ),
        )
        logger.info(
            "Enrichment finished: %d/%d component(s) succeeded",
            summary.succeeded, summary.total,
        )
        return PipelineResult(components=components, failures=records, summary=summary)

    @staticmethod
    def _check_coverage(outcomes: Sequence[ComponentOutcome], expected: int | None) -> None:
        indices = [o.index for o in outcomes]
        if len(set(indices)) != len(indices):
            duplicates = sorted({i for i in indices if indices.count(i) > 1})
            raise OutcomeInvariantError(f"Duplicate outcomes for component index(es) {duplicates}")
        if expected is not None and set(indices) != set(range(expected)):
            missing = sorted(set(range(expected)) - set(indices))
            unexpected = sorted(set(indices) - set(range(expected)))
            raise OutcomeInvariantError(
                f"Outcomes do not match input: missing {missing}, unexpected {unexpected}"
            )
