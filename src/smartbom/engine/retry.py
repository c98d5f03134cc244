"""RetryExecutor: bounded retry with deterministic exponential back-off.

On each run:
1. Checks the cancellation token, then awaits the wrapped call.
2. If the call raises and the attempt count (1-indexed) is below
   max_attempts:
   - Logs the attempt number and the delay.
   - Sleeps ``base_delay * 2**attempt`` seconds (2×, 4×, 8× … base).
   - Retries.
3. After the final attempt fails: re-raises that attempt's error unchanged.
4. Errors in ``non_retryable`` (ParseError by default) and PipelineCancelled
   propagate immediately without waiting.

No jitter is applied.  Both enrichment call sites (alternative discovery
and supplier lookup) share this class, so the back-off math lives here only.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from smartbom.engine.cancellation import AsyncioClock, CancelToken, Clock
from smartbom.exceptions import ConfigurationError, ParseError, PipelineCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_S = 1.0


class RetryExecutor:
    """Runs an async call up to *max_attempts* times with exponential back-off.

    Args:
        max_attempts:  Total attempts including the first.  Defaults to 3.
        base_delay:    Base back-off delay in seconds.  Defaults to 1.0.
        non_retryable: Exception types re-raised on first occurrence.
                       Defaults to ``(ParseError,)``.
        clock:         Clock used for back-off sleeps.

    Example::

        executor = RetryExecutor(max_attempts=3, base_delay=1.0)
        response = await executor.run(
            lambda: client.find_alternatives(component, requirements),
            description=f"alternatives for {component.name}",
        )
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY_S,
        non_retryable: tuple[type[BaseException], ...] = (ParseError,),
        clock: Clock | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be >= 1, got {max_attempts}")
        if base_delay < 0:
            raise ConfigurationError(f"base_delay must be >= 0, got {base_delay}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._non_retryable = non_retryable
        self._clock = clock or AsyncioClock()

    def backoff_delay(self, attempt: int) -> float:
        """Delay in seconds to wait after failed *attempt* (1-indexed)."""
        return self.base_delay * (2 ** attempt)

    async def run(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        token: CancelToken | None = None,
        description: str = "call",
    ) -> T:
        """Await ``fn()`` with retries.

        Args:
            fn:          Zero-argument factory returning a fresh awaitable per attempt.
            token:       Optional cancellation token checked before each attempt
                         and honoured during back-off sleeps.
            description: Label used in log messages.

        Returns:
            The value of the first successful attempt.

        Raises:
            PipelineCancelled: If *token* fires before or between attempts.
            Exception: The error of the final failed attempt, or the first
                non-retryable error.
        """
        attempt = 0
        while True:
            attempt += 1
            if token is not None:
                token.raise_if_cancelled()
            try:
                return await fn()
            except PipelineCancelled:
                raise
            except self._non_retryable as exc:
                logger.warning(
                    "%s: non-retryable %s on attempt %d: %s",
                    description, type(exc).__name__, attempt, exc,
                )
                raise
            except Exception as exc:
                if attempt >= self.max_attempts:
                    logger.error(
                        "%s: all %d attempts failed; last error: %s",
                        description, self.max_attempts, exc,
                    )
                    raise
                delay = self.backoff_delay(attempt)
                logger.info(
                    "%s: attempt %d/%d failed (%s); retrying in %.1fs",
                    description, attempt, self.max_attempts, exc, delay,
                )
                await self._clock.sleep(delay, token)
