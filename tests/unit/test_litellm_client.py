"""Unit tests for LiteLLMEnrichmentClient.

All LiteLLM calls are mocked so tests run without API keys or network access.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from smartbom.clients.litellm_client import (
    DEFAULT_ALTERNATIVES_MODEL,
    DEFAULT_SUPPLIERS_MODEL,
    LiteLLMEnrichmentClient,
)
from smartbom.config import SmartBOMConfig
from smartbom.exceptions import ParseError, ServiceError
from smartbom.models import Component, Requirements

_PATCH_TARGET = "smartbom.clients.litellm_client.litellm_acompletion"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_response(
    text: str,
    prompt_tokens: int = 10,
    completion_tokens: int = 5,
) -> MagicMock:
    """Build a mock LiteLLM response object."""
    choice = SimpleNamespace(message=SimpleNamespace(content=text))
    usage = SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    resp = MagicMock()
    resp.choices = [choice]
    resp.usage = usage
    return resp


_ALTERNATIVES_TEXT = (
    "<think>Considering regulators.</think>\n```json\n"
    + json.dumps(
        {
            "alternatives": [
                {"name": "LM317", "partNumber": "LM317T", "keyAdvantages": ["Adjustable"]},
                {"name": "AMS1117", "partNumber": "AMS1117-5.0"},
            ]
        }
    )
    + "\n```"
)

_SUPPLIERS_TEXT = json.dumps(
    {
        "baselineAnalysis": {"manufacturer": "TI", "baselinePriceINR": 25},
        "alternativeSuppliers": [
            {
                "supplierName": "Robu",
                "country": "India",
                "classification": 2,
                "landedCostINR": {"totalLandedCostINR": 22.5},
            }
        ],
    }
)


@pytest.fixture
def component() -> Component:
    return Component(name="Voltage Regulator", part_number="LM7805", quantity=100)


@pytest.fixture
def reqs() -> Requirements:
    return Requirements(sourcing_location="India", compliance_requirements=["RoHS"])


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_default_models(self) -> None:
        client = LiteLLMEnrichmentClient()
        assert client.alternatives_model == DEFAULT_ALTERNATIVES_MODEL
        assert client.suppliers_model == DEFAULT_SUPPLIERS_MODEL

    def test_from_config(self) -> None:
        config = SmartBOMConfig(
            alternatives_model="openai/gpt-4o",
            suppliers_model="openai/gpt-4o-mini",
            alternatives_timeout=10,
            suppliers_timeout=20,
        )
        client = LiteLLMEnrichmentClient.from_config(config)
        assert client.alternatives_model == "openai/gpt-4o"
        assert client.suppliers_model == "openai/gpt-4o-mini"
        assert client.alternatives_timeout == 10
        assert client.suppliers_timeout == 20

    def test_from_config_template_override(self, tmp_path) -> None:
        (tmp_path / "prompts").mkdir()
        config = SmartBOMConfig(project_dir=tmp_path, template_dir="prompts")
        client = LiteLLMEnrichmentClient.from_config(config)
        assert client._prompts.search_path[0] == tmp_path / "prompts"


# ---------------------------------------------------------------------------
# find_alternatives
# ---------------------------------------------------------------------------


class TestFindAlternatives:
    async def test_parses_wrapped_response(self, component, reqs) -> None:
        with patch(_PATCH_TARGET, new=AsyncMock(return_value=_mock_response(_ALTERNATIVES_TEXT))):
            response = await LiteLLMEnrichmentClient().find_alternatives(component, reqs)

        assert [a.part_number for a in response.alternatives] == ["LM317T", "AMS1117-5.0"]

    async def test_request_shape(self, component, reqs) -> None:
        mock = AsyncMock(return_value=_mock_response(_ALTERNATIVES_TEXT))
        with patch(_PATCH_TARGET, new=mock):
            await LiteLLMEnrichmentClient(temperature=0.1).find_alternatives(component, reqs)

        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == DEFAULT_ALTERNATIVES_MODEL
        assert kwargs["temperature"] == 0.1
        assert kwargs["response_format"]["type"] == "json_schema"
        system, user = kwargs["messages"]
        assert system["role"] == "system"
        assert "LM7805" in user["content"]
        assert "RoHS" in user["content"]
        assert "at most 2 alternatives" in user["content"]

    async def test_usage_tracked(self, component, reqs) -> None:
        client = LiteLLMEnrichmentClient()
        with patch(_PATCH_TARGET, new=AsyncMock(return_value=_mock_response(_ALTERNATIVES_TEXT, 100, 40))):
            await client.find_alternatives(component, reqs)
        assert client.tracker.get_total_tokens() == 140
        assert client.tracker.get_model_breakdown()[DEFAULT_ALTERNATIVES_MODEL]["calls"] == 1

    async def test_unparseable_response(self, component, reqs) -> None:
        with patch(_PATCH_TARGET, new=AsyncMock(return_value=_mock_response("No idea, sorry."))):
            with pytest.raises(ParseError):
                await LiteLLMEnrichmentClient().find_alternatives(component, reqs)

    async def test_none_content_is_parse_error(self, component, reqs) -> None:
        with patch(_PATCH_TARGET, new=AsyncMock(return_value=_mock_response(None))):  # type: ignore[arg-type]
            with pytest.raises(ParseError):
                await LiteLLMEnrichmentClient().find_alternatives(component, reqs)

    async def test_transport_error_becomes_service_error(self, component, reqs) -> None:
        with patch(_PATCH_TARGET, new=AsyncMock(side_effect=ConnectionError("reset by peer"))):
            with pytest.raises(ServiceError, match="Failed to process find_alternatives") as exc_info:
                await LiteLLMEnrichmentClient().find_alternatives(component, reqs)
        assert exc_info.value.operation == "find_alternatives"

    @pytest.mark.parametrize(
        "error_name",
        [
            "ServiceUnavailableError",
            "InternalServerError",
            "NotFoundError",
            "APIResponseValidationError",
            "RateLimitError",
        ],
    )
    async def test_provider_status_errors_become_service_error(
        self, component, reqs, error_name: str
    ) -> None:
        import litellm.exceptions

        error_cls = getattr(litellm.exceptions, error_name)
        error = error_cls(message="provider down", llm_provider="perplexity", model="sonar")
        with patch(_PATCH_TARGET, new=AsyncMock(side_effect=error)):
            with pytest.raises(ServiceError) as exc_info:
                await LiteLLMEnrichmentClient().find_alternatives(component, reqs)
        assert exc_info.value.__cause__ is error

    async def test_empty_choices_is_parse_error(self, component, reqs) -> None:
        response = _mock_response("unused")
        response.choices = []
        with patch(_PATCH_TARGET, new=AsyncMock(return_value=response)):
            with pytest.raises(ParseError, match="Empty response"):
                await LiteLLMEnrichmentClient().find_alternatives(component, reqs)


# ---------------------------------------------------------------------------
# find_suppliers
# ---------------------------------------------------------------------------


class TestFindSuppliers:
    async def test_parses_suppliers(self, component, reqs) -> None:
        with patch(_PATCH_TARGET, new=AsyncMock(return_value=_mock_response(_SUPPLIERS_TEXT))):
            response = await LiteLLMEnrichmentClient().find_suppliers(component, reqs)

        assert response.baseline_analysis.manufacturer == "TI"
        offer = response.alternative_suppliers[0]
        assert offer.supplier_name == "Robu"
        assert offer.classification_label == "Better Quality but lower price"

    async def test_uses_suppliers_model_and_classifications(self, component, reqs) -> None:
        mock = AsyncMock(return_value=_mock_response(_SUPPLIERS_TEXT))
        with patch(_PATCH_TARGET, new=mock):
            await LiteLLMEnrichmentClient().find_suppliers(component, reqs)

        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == DEFAULT_SUPPLIERS_MODEL
        user = kwargs["messages"][1]["content"]
        assert "10. Better Quality, higher price and better returns and warranty support" in user
        assert "prioritising India" in user

    async def test_extra_completion_kwargs_forwarded(self, component, reqs) -> None:
        mock = AsyncMock(return_value=_mock_response(_SUPPLIERS_TEXT))
        with patch(_PATCH_TARGET, new=mock):
            await LiteLLMEnrichmentClient(api_base="http://localhost:4000").find_suppliers(component, reqs)
        assert mock.call_args.kwargs["api_base"] == "http://localhost:4000"
