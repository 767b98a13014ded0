"""Per-request analysis context.

Carries everything one analysis accumulates as it moves through the
pipeline: the main topic used to steer lookups, LLM token usage and cost,
the wall-clock deadline, and enrichment counters. One context belongs to
exactly one request.
"""

import time
from dataclasses import dataclass, field

from ontologizer.llm.models import UsageStats

# Default wall-clock ceiling for one analysis
DEFAULT_BUDGET_SECONDS = 180.0


@dataclass
class EnrichmentStats:
    """Counters collected by the enrichment loop."""

    processed: int = 0
    successful: int = 0
    cache_hits: int = 0
    filtered: int = 0
    stopped_by_breaker: bool = False
    stopped_by_budget: bool = False

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "successful": self.successful,
            "cache_hits": self.cache_hits,
            "filtered": self.filtered,
            "stopped_by_breaker": self.stopped_by_breaker,
            "stopped_by_budget": self.stopped_by_budget,
        }


@dataclass
class AnalysisContext:
    """Mutable state threaded through one analysis."""

    main_topic: str = ""
    budget_seconds: float = DEFAULT_BUDGET_SECONDS
    usage: UsageStats = field(default_factory=UsageStats)
    enrichment: EnrichmentStats = field(default_factory=EnrichmentStats)
    started_at: float = field(default_factory=time.monotonic)

    @property
    def deadline(self) -> float:
        return self.started_at + self.budget_seconds

    def elapsed(self) -> float:
        """Seconds since the analysis started."""
        return time.monotonic() - self.started_at

    def time_remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self.deadline - time.monotonic())

    def budget_exceeded(self) -> bool:
        return time.monotonic() >= self.deadline

    def record_usage(self, usage: UsageStats) -> None:
        """Accumulate LLM usage for this request."""
        self.usage = self.usage.add(usage)

    @property
    def token_usage(self) -> int:
        return self.usage.total_tokens

    @property
    def cost_usd(self) -> float:
        return round(self.usage.estimated_cost_usd, 6)
