"""LiteLLM-backed research client.

Alternative discovery uses a reasoning model; supplier research uses a
deep-research model.  Both default to Perplexity's Sonar family through
LiteLLM's provider routing, and any LiteLLM model string can be configured.

Responses are free-form text that usually wraps a JSON object; they are
decoded with :func:`smartbom.clients.parsing.parse_response`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Type, TypeVar

from pydantic import BaseModel

from smartbom.clients.base import (
    DEFAULT_ALTERNATIVES_TIMEOUT_S,
    DEFAULT_SUPPLIERS_TIMEOUT_S,
    EnrichmentClient,
)
from smartbom.clients.parsing import parse_response
from smartbom.clients.prompts import PromptTemplate
from smartbom.clients.usage import UsageTracker
from smartbom.exceptions import ConfigurationError, ParseError, ServiceError
from smartbom.models import (
    MAX_ALTERNATIVES,
    SUPPLIER_CLASSIFICATIONS,
    AlternativesResponse,
    Component,
    Requirements,
    SupplierResponse,
)

if TYPE_CHECKING:
    from smartbom.config import SmartBOMConfig

# ---------------------------------------------------------------------------
# LiteLLM imports (lazy so tests can mock at module level)
# ---------------------------------------------------------------------------
try:
    import litellm
    from litellm import acompletion as litellm_acompletion
    from litellm.exceptions import (
        APIConnectionError as LiteLLMAPIConnectionError,
        APIError as LiteLLMAPIError,
        APIResponseValidationError as LiteLLMAPIResponseValidationError,
        AuthenticationError as LiteLLMAuthenticationError,
        BadRequestError as LiteLLMBadRequestError,
        InternalServerError as LiteLLMInternalServerError,
        NotFoundError as LiteLLMNotFoundError,
        PermissionDeniedError as LiteLLMPermissionDeniedError,
        RateLimitError as LiteLLMRateLimitError,
        ServiceUnavailableError as LiteLLMServiceUnavailableError,
        Timeout as LiteLLMTimeout,
        UnprocessableEntityError as LiteLLMUnprocessableEntityError,
    )

    _LITELLM_AVAILABLE = True
except ImportError:  # pragma: no cover
    _LITELLM_AVAILABLE = False

# Provider and transport errors surfaced as ServiceError.  Several LiteLLM
# status errors (5xx, 404, response validation) do not derive from APIError.
_SERVICE_ERRORS: tuple[type[Exception], ...] = (ConnectionError,)
if _LITELLM_AVAILABLE:
    _SERVICE_ERRORS = (
        LiteLLMAPIConnectionError,
        LiteLLMAPIError,
        LiteLLMAPIResponseValidationError,
        LiteLLMAuthenticationError,
        LiteLLMBadRequestError,
        LiteLLMInternalServerError,
        LiteLLMNotFoundError,
        LiteLLMPermissionDeniedError,
        LiteLLMRateLimitError,
        LiteLLMServiceUnavailableError,
        LiteLLMTimeout,
        LiteLLMUnprocessableEntityError,
        ConnectionError,
    )

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_ALTERNATIVES_MODEL = "perplexity/sonar-reasoning-pro"
DEFAULT_SUPPLIERS_MODEL = "perplexity/sonar-deep-research"


def _json_schema_format(schema: Type[BaseModel]) -> dict[str, Any]:
    """Build a ``response_format`` requesting JSON matching *schema*."""
    return {
        "type": "json_schema",
        "json_schema": {"schema": schema.model_json_schema(by_alias=True)},
    }


class LiteLLMEnrichmentClient(EnrichmentClient):
    """Research client that calls LLM providers through LiteLLM.

    Example::

        client = LiteLLMEnrichmentClient()
        response = await client.find_alternatives(component, requirements)
    """

    def __init__(
        self,
        alternatives_model: str = DEFAULT_ALTERNATIVES_MODEL,
        suppliers_model: str = DEFAULT_SUPPLIERS_MODEL,
        *,
        temperature: float = 0.3,
        max_tokens: int = 8000,
        alternatives_timeout: float = DEFAULT_ALTERNATIVES_TIMEOUT_S,
        suppliers_timeout: float = DEFAULT_SUPPLIERS_TIMEOUT_S,
        prompts: PromptTemplate | None = None,
        tracker: UsageTracker | None = None,
        **completion_kwargs: Any,
    ) -> None:
        if not _LITELLM_AVAILABLE:
            raise ConfigurationError(
                "litellm is not installed. Run: pip install litellm"
            )
        super().__init__(alternatives_timeout, suppliers_timeout)
        self.alternatives_model = alternatives_model
        self.suppliers_model = suppliers_model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._prompts = prompts or PromptTemplate()
        self._tracker = tracker or UsageTracker()
        self._completion_kwargs = completion_kwargs

        # Suppress litellm's own verbose logging by default
        litellm.suppress_debug_info = True

    @classmethod
    def from_config(cls, config: "SmartBOMConfig", **kwargs: Any) -> "LiteLLMEnrichmentClient":
        if kwargs.get("prompts") is None:
            kwargs["prompts"] = PromptTemplate(config.prompt_dir())
        return cls(
            alternatives_model=config.alternatives_model,
            suppliers_model=config.suppliers_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            alternatives_timeout=config.alternatives_timeout,
            suppliers_timeout=config.suppliers_timeout,
            **kwargs,
        )

    @property
    def tracker(self) -> UsageTracker:
        """Access the token usage tracker."""
        return self._tracker

    # ------------------------------------------------------------------
    # EnrichmentClient hooks
    # ------------------------------------------------------------------

    async def _request_alternatives(
        self,
        component: Component,
        requirements: Requirements,
    ) -> AlternativesResponse:
        messages = self._prompts.messages(
            "alternatives_system",
            "find_alternatives",
            component=component,
            requirements=requirements,
            max_alternatives=MAX_ALTERNATIVES,
        )
        return await self._complete(
            messages, self.alternatives_model, AlternativesResponse, "find_alternatives"
        )

    async def _request_suppliers(
        self,
        component: Component,
        requirements: Requirements,
    ) -> SupplierResponse:
        messages = self._prompts.messages(
            "suppliers_system",
            "find_suppliers",
            component=component,
            requirements=requirements,
            classifications=SUPPLIER_CLASSIFICATIONS,
        )
        return await self._complete(
            messages, self.suppliers_model, SupplierResponse, "find_suppliers"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _complete(
        self,
        messages: list[dict[str, Any]],
        model: str,
        schema: Type[M],
        operation: str,
    ) -> M:
        """Run one completion and parse it into *schema*.

        Raises:
            ServiceError: On any LiteLLM transport / provider error.
            ParseError:   If the response body cannot be parsed.
        """
        logger.debug("%s request with model %s", operation, model)
        try:
            response = await litellm_acompletion(
                model=model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                response_format=_json_schema_format(schema),
                **self._completion_kwargs,
            )
        except _SERVICE_ERRORS as exc:
            raise ServiceError(f"Failed to process {operation}: {exc}", operation=operation) from exc

        if not response.choices:
            raise ParseError(f"Empty response from {model} for {operation}", raw="")
        text = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        self._tracker.record(
            model,
            usage.prompt_tokens if usage else 0,
            usage.completion_tokens if usage else 0,
        )
        return parse_response(text, schema)
