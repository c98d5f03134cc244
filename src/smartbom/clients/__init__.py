"""Research clients used by the enrichment engine.

- :class:`EnrichmentClient` – abstract client with per-operation timeouts
- :class:`LiteLLMEnrichmentClient` – live client via LiteLLM
- :class:`MockEnrichmentClient` – deterministic offline client
- :func:`extract_json_payload` – tolerant JSON extraction from model output
"""

from smartbom.clients.base import EnrichmentClient
from smartbom.clients.litellm_client import LiteLLMEnrichmentClient
from smartbom.clients.mock_client import MockEnrichmentClient
from smartbom.clients.parsing import extract_json_payload, parse_response
from smartbom.clients.prompts import PromptTemplate
from smartbom.clients.usage import UsageTracker

__all__ = [
    "EnrichmentClient",
    "LiteLLMEnrichmentClient",
    "MockEnrichmentClient",
    "PromptTemplate",
    "UsageTracker",
    "extract_json_payload",
    "parse_response",
]
