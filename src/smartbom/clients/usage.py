"""Token and call accounting for research clients."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class _ModelUsage:
    """Accumulated usage for a single model."""

    calls: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0


class UsageTracker:
    """Accumulates token usage across research calls.

    Safe to share between the concurrent tasks of one event loop: updates
    happen synchronously between suspension points.

    Example::

        tracker = UsageTracker()
        tracker.record("perplexity/sonar-reasoning-pro", 100, 50)
        tracker.get_total_tokens()   # 150
    """

    def __init__(self) -> None:
        self._usage: dict[str, _ModelUsage] = {}

    def record(self, model: str, prompt_tokens: int, completion_tokens: int) -> None:
        """Record one completed call for *model*."""
        entry = self._usage.setdefault(model, _ModelUsage())
        entry.calls += 1
        entry.prompt_tokens += prompt_tokens
        entry.completion_tokens += completion_tokens

    def get_total_tokens(self) -> int:
        """Return total tokens (prompt + completion) across all models."""
        return sum(u.prompt_tokens + u.completion_tokens for u in self._usage.values())

    def get_total_calls(self) -> int:
        return sum(u.calls for u in self._usage.values())

    def get_model_breakdown(self) -> dict[str, dict[str, int]]:
        """Return per-model usage as plain dictionaries."""
        return {
            model: {
                "calls": u.calls,
                "prompt_tokens": u.prompt_tokens,
                "completion_tokens": u.completion_tokens,
            }
            for model, u in self._usage.items()
        }

    def reset(self) -> None:
        self._usage.clear()
