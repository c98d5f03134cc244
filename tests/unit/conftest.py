"""Shared fakes for the SmartBOM unit tests.

- :class:`ScriptedClient` – in-memory EnrichmentClient with per-call scripted
  failures and call/in-flight bookkeeping.
- :class:`RecordingClock` – virtual clock that records every requested wait
  instead of sleeping.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict

import pytest

from smartbom.clients.base import EnrichmentClient
from smartbom.engine.cancellation import CancelToken
from smartbom.exceptions import ServiceError
from smartbom.models import (
    AlternativeComponent,
    AlternativesResponse,
    BaselineAnalysis,
    Component,
    LandedCost,
    Requirements,
    SupplierOffer,
    SupplierResponse,
)

ALTERNATIVES = "find_alternatives"
SUPPLIERS = "find_suppliers"


class RecordingClock:
    """Virtual :class:`~smartbom.engine.cancellation.Clock`.

    Every ``sleep`` is recorded, advances :meth:`monotonic` and yields once
    to the event loop so that concurrent tasks interleave.
    """

    def __init__(self) -> None:
        self.sleeps: list[float] = []
        self.now = 0.0

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float, token: CancelToken | None = None) -> None:
        if token is not None:
            token.raise_if_cancelled()
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)
        if token is not None:
            token.raise_if_cancelled()


class ScriptedClient(EnrichmentClient):
    """EnrichmentClient whose responses and failures are scripted per name.

    By default every component gets ``alternatives_per_component``
    alternatives named ``"<name> Alt <n>"`` and every supplier lookup
    returns a single offer with a landed cost of ``100.0``.

    Failures are scripted with :meth:`fail` and keyed by operation and
    entry name.
    """

    def __init__(self, alternatives_per_component: int = 2, yields: int = 3) -> None:
        super().__init__()
        self.alternatives_per_component = alternatives_per_component
        self.yields = yields
        self.extra_yields: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.alternatives: dict[str, list[AlternativeComponent]] = {}
        self.offers: dict[str, list[SupplierOffer]] = {}
        self.in_flight: dict[str, int] = defaultdict(int)
        self.max_in_flight: dict[str, int] = defaultdict(int)
        self.closed = False
        self._errors: dict[tuple[str, str], list[BaseException]] = defaultdict(list)
        self._always: dict[tuple[str, str], BaseException] = {}

    # ------------------------------------------------------------------
    # Scripting
    # ------------------------------------------------------------------

    def fail(
        self,
        operation: str,
        name: str,
        *errors: BaseException,
        always: bool = False,
    ) -> None:
        """Make calls for *name* raise *errors* in order (or forever)."""
        errors = errors or (ServiceError("scripted failure", operation=operation),)
        if always:
            self._always[(operation, name)] = errors[0]
        else:
            self._errors[(operation, name)].extend(errors)

    def call_count(self, operation: str, name: str | None = None) -> int:
        return sum(1 for op, n in self.calls if op == operation and (name is None or n == name))

    # ------------------------------------------------------------------
    # EnrichmentClient hooks
    # ------------------------------------------------------------------

    async def _request_alternatives(
        self, component: Component, requirements: Requirements
    ) -> AlternativesResponse:
        await self._enter(ALTERNATIVES, component.name)
        alternatives = self.alternatives.get(component.name)
        if alternatives is None:
            alternatives = [
                AlternativeComponent(
                    name=f"{component.name} Alt {n}",
                    part_number=f"{component.name.upper()}-ALT{n}",
                    key_advantages=[f"advantage {n}"],
                )
                for n in range(1, self.alternatives_per_component + 1)
            ]
        return AlternativesResponse(alternatives=alternatives)

    async def _request_suppliers(
        self, component: Component, requirements: Requirements
    ) -> SupplierResponse:
        await self._enter(SUPPLIERS, component.name)
        offers = self.offers.get(component.name)
        if offers is None:
            offers = [
                SupplierOffer(
                    supplier_name=f"Supplier for {component.name}",
                    classification=2,
                    landed_cost=LandedCost(total_landed_cost=100.0),
                )
            ]
        return SupplierResponse(
            baseline_analysis=BaselineAnalysis(baseline_price=90.0),
            alternative_suppliers=offers,
        )

    async def aclose(self) -> None:
        self.closed = True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _enter(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        self.in_flight[operation] += 1
        self.max_in_flight[operation] = max(
            self.max_in_flight[operation], self.in_flight[operation]
        )
        try:
            for _ in range(self.yields + self.extra_yields.get(name, 0)):
                await asyncio.sleep(0)
            key = (operation, name)
            if key in self._always:
                raise self._always[key]
            if self._errors.get(key):
                raise self._errors[key].pop(0)
        finally:
            self.in_flight[operation] -= 1


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> RecordingClock:
    return RecordingClock()


@pytest.fixture
def client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture
def requirements() -> Requirements:
    return Requirements(sourcing_location="India", supplier_priority=["cost"])


def make_components(count: int) -> list[Component]:
    """Return *count* components named ``C0`` … ``C<count-1>``."""
    return [Component(name=f"C{i}", quantity=i + 1) for i in range(count)]
