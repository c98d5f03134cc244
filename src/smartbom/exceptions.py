"""Exception hierarchy for the SmartBOM enrichment pipeline.

All exceptions raised by the package are subclasses of ``SmartBOMError``.
This lets callers catch any pipeline error with a single except clause while
still being able to discriminate between specific error types.

Error taxonomy:

Retryable (bounded by RetryExecutor):
    ServiceError          - timeout, transport failure, non-success status
    ServiceTimeoutError   - a call exceeded its per-operation timeout

Terminal for the call that raised it:
    ParseError            - upstream body cannot be parsed into the expected shape

Converted to data before reaching the scheduler:
    ComponentFailure      - alternative discovery failed; becomes a Failure outcome
    SupplierEntryFailure  - one supplier lookup failed; becomes an empty entry

Raised to callers:
    PipelineFailure       - zero components succeeded
    PipelineCancelled     - the run was cancelled through its CancelToken
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from smartbom.models import FailureRecord


class SmartBOMError(Exception):
    """Base class for all SmartBOM exceptions."""


class ConfigurationError(SmartBOMError):
    """Raised when pipeline or client configuration is invalid.

    Examples: missing litellm install, out-of-range batch size, bad TOML.
    """


class TemplateError(SmartBOMError):
    """Raised when a prompt template cannot be found or rendered."""


class InputError(SmartBOMError):
    """Raised when a component or requirements file cannot be read."""


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------

class ServiceError(SmartBOMError):
    """The external enrichment service failed transiently.

    Attributes:
        operation: Client operation that failed (``find_alternatives`` …).
    """

    def __init__(self, message: str, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class ServiceTimeoutError(ServiceError):
    """A client call exceeded its configured timeout.

    Attributes:
        timeout: The timeout in seconds that elapsed.
    """

    def __init__(self, operation: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s", operation=operation)


class ParseError(SmartBOMError):
    """The upstream response could not be parsed into a structured payload.

    Not retryable: the same prompt tends to yield the same malformed shape.

    Attributes:
        raw: Leading excerpt of the offending response (for diagnostics).
    """

    RAW_EXCERPT_LEN = 500

    def __init__(self, message: str, raw: str = "") -> None:
        self.raw = raw[: self.RAW_EXCERPT_LEN]
        super().__init__(message)


# ---------------------------------------------------------------------------
# Pipeline errors
# ---------------------------------------------------------------------------

class ComponentFailure(SmartBOMError):
    """Enrichment of an entire component failed.

    Attributes:
        component_name: Name of the component that failed.
        index:          Position of the component in the input list.
        cause:          Underlying error (None for synthetic failures).
    """

    def __init__(
        self,
        component_name: str,
        index: int,
        cause: BaseException | None = None,
    ) -> None:
        self.component_name = component_name
        self.index = index
        self.cause = cause
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(reason)
        if cause is not None:
            self.__cause__ = cause


class SupplierEntryFailure(SmartBOMError):
    """Supplier lookup failed for one entry (main component or an alternative).

    Attributes:
        position:   Entry position in the fan-out list (0 = main component).
        entry_name: Name of the component or alternative.
    """

    def __init__(self, position: int, entry_name: str, cause: BaseException) -> None:
        self.position = position
        self.entry_name = entry_name
        super().__init__(str(cause))
        self.__cause__ = cause


class PipelineFailure(SmartBOMError):
    """Every component failed; nothing could be enriched.

    Attributes:
        failures: One record per failed component, in input order.
    """

    def __init__(self, failures: Sequence["FailureRecord"]) -> None:
        self.failures = list(failures)
        details = "; ".join(f.describe() for f in self.failures)
        super().__init__(f"All components failed to process: {details}")


class PipelineCancelled(SmartBOMError):
    """The pipeline was stopped through its cancellation token.

    Attributes:
        outcomes: Outcomes of the batches that completed before cancellation.
    """

    def __init__(self, message: str = "Pipeline cancelled", outcomes: Sequence[Any] = ()) -> None:
        self.outcomes = list(outcomes)
        super().__init__(message)


class OutcomeInvariantError(SmartBOMError):
    """Outcomes do not cover every input position exactly once."""
