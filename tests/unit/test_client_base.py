"""Unit tests for smartbom.clients.base.EnrichmentClient."""

from __future__ import annotations

import asyncio

import pytest

from smartbom.clients.base import EnrichmentClient
from smartbom.exceptions import ConfigurationError, ServiceTimeoutError
from smartbom.models import (
    AlternativeComponent,
    AlternativesResponse,
    Component,
    Requirements,
    SupplierResponse,
)


class SlowClient(EnrichmentClient):
    """Client whose requests take *latency* seconds."""

    def __init__(self, latency: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.latency = latency

    async def _request_alternatives(self, component, requirements):
        await asyncio.sleep(self.latency)
        return AlternativesResponse(alternatives=[AlternativeComponent(name="alt")])

    async def _request_suppliers(self, component, requirements):
        await asyncio.sleep(self.latency)
        return SupplierResponse()


class TestConstruction:
    def test_default_timeouts(self) -> None:
        client = SlowClient(0)
        assert client.alternatives_timeout == 60.0
        assert client.suppliers_timeout == 120.0

    @pytest.mark.parametrize("kwargs", [{"alternatives_timeout": 0}, {"suppliers_timeout": -1}])
    def test_non_positive_timeout_rejected(self, kwargs) -> None:
        with pytest.raises(ConfigurationError):
            SlowClient(0, **kwargs)

    def test_cannot_instantiate_abstract(self) -> None:
        with pytest.raises(TypeError):
            EnrichmentClient()  # type: ignore[abstract]


class TestOperations:
    async def test_find_alternatives_within_timeout(self) -> None:
        response = await SlowClient(0).find_alternatives(Component(name="X"), Requirements())
        assert response.alternatives[0].name == "alt"

    async def test_alternatives_timeout(self) -> None:
        client = SlowClient(1.0, alternatives_timeout=0.01)
        with pytest.raises(ServiceTimeoutError) as exc_info:
            await client.find_alternatives(Component(name="X"), Requirements())
        assert exc_info.value.operation == "find_alternatives"
        assert exc_info.value.timeout == 0.01
        assert str(exc_info.value) == "find_alternatives timed out after 0.01s"

    async def test_suppliers_timeout(self) -> None:
        client = SlowClient(1.0, suppliers_timeout=0.01)
        with pytest.raises(ServiceTimeoutError, match="find_suppliers"):
            await client.find_suppliers(Component(name="X"), Requirements())

    async def test_aclose_is_noop(self) -> None:
        await SlowClient(0).aclose()
