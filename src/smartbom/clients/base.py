"""EnrichmentClient: the pipeline's single external collaborator.

Concrete clients implement two request hooks; the public operations wrap
them with the per-operation timeout so every implementation honours the
same contract:

- ``find_alternatives`` → :class:`AlternativesResponse` (timeout 60 s)
- ``find_suppliers``    → :class:`SupplierResponse`     (timeout 120 s)

Failures surface as :class:`ServiceError` (retryable, including timeouts)
or :class:`ParseError` (terminal).
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, TypeVar

from smartbom.exceptions import ConfigurationError, ServiceTimeoutError
from smartbom.models import (
    AlternativesResponse,
    Component,
    Requirements,
    SupplierResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ALTERNATIVES_TIMEOUT_S = 60.0
DEFAULT_SUPPLIERS_TIMEOUT_S = 120.0


class EnrichmentClient(ABC):
    """Abstract client for alternative and supplier discovery.

    Args:
        alternatives_timeout: Seconds allowed for one ``find_alternatives`` call.
        suppliers_timeout:    Seconds allowed for one ``find_suppliers`` call.
    """

    def __init__(
        self,
        alternatives_timeout: float = DEFAULT_ALTERNATIVES_TIMEOUT_S,
        suppliers_timeout: float = DEFAULT_SUPPLIERS_TIMEOUT_S,
    ) -> None:
        if alternatives_timeout <= 0 or suppliers_timeout <= 0:
            raise ConfigurationError("Client timeouts must be positive")
        self.alternatives_timeout = alternatives_timeout
        self.suppliers_timeout = suppliers_timeout

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def find_alternatives(
        self,
        component: Component,
        requirements: Requirements,
    ) -> AlternativesResponse:
        """Find functionally equivalent alternatives for *component*."""
        return await self.call_with_timeout(
            self._request_alternatives(component, requirements),
            operation="find_alternatives",
            timeout=self.alternatives_timeout,
        )

    async def find_suppliers(
        self,
        component: Component,
        requirements: Requirements,
    ) -> SupplierResponse:
        """Find supplier offers for *component* (a main part or an alternative)."""
        return await self.call_with_timeout(
            self._request_suppliers(component, requirements),
            operation="find_suppliers",
            timeout=self.suppliers_timeout,
        )

    async def aclose(self) -> None:
        """Release client resources.  No-op by default."""

    # ------------------------------------------------------------------
    # Hooks for concrete clients
    # ------------------------------------------------------------------

    @abstractmethod
    async def _request_alternatives(
        self,
        component: Component,
        requirements: Requirements,
    ) -> AlternativesResponse:
        ...

    @abstractmethod
    async def _request_suppliers(
        self,
        component: Component,
        requirements: Requirements,
    ) -> SupplierResponse:
        ...

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def call_with_timeout(
        awaitable: Awaitable[T],
        operation: str,
        timeout: float,
    ) -> T:
        """Await *awaitable*, converting a timeout into ServiceTimeoutError."""
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except TimeoutError as exc:
            logger.warning("%s exceeded its %.0fs timeout", operation, timeout)
            raise ServiceTimeoutError(operation, timeout) from exc
