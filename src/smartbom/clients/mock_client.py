"""Deterministic offline research client for demos and local runs.

Responses are rendered as the research service would send them (reasoning
block + fenced JSON) and go through the normal parsing path, so a mock run
exercises the same code as a live one without network access or API keys.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
from typing import Any

from smartbom.clients.base import EnrichmentClient
from smartbom.clients.parsing import parse_response
from smartbom.models import (
    AlternativesResponse,
    Component,
    Requirements,
    SupplierResponse,
)

_SUPPLIERS: list[tuple[str, str]] = [
    ("Robu Components", "India"),
    ("Shenzhen Kinglong Electronics", "China"),
    ("Hanbit Precision", "South Korea"),
    ("Formosa Parts Co.", "Taiwan"),
]


def _seed(*parts: str) -> int:
    """Stable small integer derived from *parts* (independent of PYTHONHASHSEED)."""
    digest = hashlib.sha256("|".join(parts).encode()).hexdigest()
    return int(digest[:8], 16)


def _wrap(payload: dict[str, Any]) -> str:
    return (
        "<think>Comparing catalogue data against the requirements.</think>\n"
        "Here is the result:\n"
        f"```json\n{json.dumps(payload, indent=2)}\n```"
    )


class MockEnrichmentClient(EnrichmentClient):
    """Offline client returning plausible, repeatable research results.

    Args:
        latency:            Simulated seconds per call.
        alternatives_count: Alternatives suggested per component.
        suppliers_count:    Supplier offers returned per lookup.
    """

    def __init__(
        self,
        latency: float = 0.0,
        alternatives_count: int = 2,
        suppliers_count: int = 2,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._latency = latency
        self._alternatives_count = alternatives_count
        self._suppliers_count = suppliers_count

    async def _request_alternatives(
        self,
        component: Component,
        requirements: Requirements,
    ) -> AlternativesResponse:
        await asyncio.sleep(self._latency)
        priority = requirements.supplier_priority[0] if requirements.supplier_priority else "cost"
        variants = [("Pro", "Higher durability"), ("Lite", "Lower unit cost"), ("Max", "Extended warranty")]
        alternatives = []
        for suffix, advantage in (variants * 2)[: self._alternatives_count]:
            base = _seed(component.name, suffix) % 400 + 100
            alternatives.append(
                {
                    "partNumber": f"{(component.part_number or component.name)[:12].upper()}-{suffix.upper()}",
                    "name": f"{component.name} {suffix}",
                    "description": f"Drop-in substitute for {component.name}",
                    "specifications": component.specifications or "Equivalent to original",
                    "costRange": f"INR {base}-{base + 150}",
                    "keyAdvantages": [advantage, f"Matches {priority} priority"],
                    "potentialDrawbacks": ["Requires qualification testing"],
                }
            )
        return parse_response(_wrap({"alternatives": alternatives}), AlternativesResponse)

    async def _request_suppliers(
        self,
        component: Component,
        requirements: Requirements,
    ) -> SupplierResponse:
        await asyncio.sleep(self._latency)
        baseline_price = float(_seed(component.name) % 900 + 100)
        offers = []
        for rank in range(self._suppliers_count):
            name, country = _SUPPLIERS[(_seed(component.name, str(rank)) + rank) % len(_SUPPLIERS)]
            price = round(baseline_price * (0.8 + 0.1 * rank), 2)
            shipping = round(price * 0.05, 2)
            customs = round(price * 0.1, 2) if country != "India" else 0.0
            offers.append(
                {
                    "supplierName": name,
                    "country": country,
                    "supplierURL": None,
                    "productPageURL": None,
                    "manufacturer": name.split()[0],
                    "keySpecifications": component.specifications or None,
                    "classification": _seed(component.name, name) % 10 + 1,
                    "landedCostINR": {
                        "localCurrencyPrice": price,
                        "exchangeRateUsed": 1.0,
                        "estimatedShippingINR": shipping,
                        "estimatedCustomsINR": customs,
                        "totalLandedCostINR": round(price + shipping + customs, 2),
                    },
                    "leadTime": f"{2 + rank} weeks",
                    "reliabilityNotes": "Established supplier with verified listings",
                }
            )
        payload = {
            "baselineAnalysis": {
                "primaryCategory": "Electronic component",
                "manufacturer": "Generic",
                "keySpecifications": component.specifications or None,
                "baselinePriceINR": baseline_price,
                "sourceURL": None,
                "productPageURL": None,
            },
            "alternativeSuppliers": offers,
        }
        return parse_response(_wrap(payload), SupplierResponse)
