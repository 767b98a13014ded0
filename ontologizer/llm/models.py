"""Data models for LLM completion calls."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ProviderType(StrEnum):
    """Supported LLM providers."""

    OPENAI = "openai"
    GEMINI = "gemini"
    STUB = "stub"


@dataclass
class UsageStats:
    """Token usage and cost tracking."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    estimated_cost_usd: float = 0.0

    def add(self, other: "UsageStats") -> "UsageStats":
        """Add another UsageStats to this one."""
        return UsageStats(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            estimated_cost_usd=self.estimated_cost_usd + other.estimated_cost_usd,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "estimated_cost_usd": round(self.estimated_cost_usd, 6),
        }


@dataclass
class LLMError:
    """Error from a provider."""

    provider: ProviderType
    error_type: str
    message: str
    retryable: bool = True
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "provider": self.provider.value,
            "error_type": self.error_type,
            "message": self.message,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class CompletionRequest:
    """A single prompt sent to a provider."""

    prompt: str
    model: str
    max_tokens: int = 1000
    temperature: float = 0.3
    json_mode: bool = False

    # Gemini sampling controls, ignored by OpenAI
    top_k: int | None = None
    top_p: float | None = None


@dataclass
class CompletionResponse:
    """Response from a provider."""

    provider: ProviderType
    model: str
    content: str
    success: bool = True
    usage: UsageStats = field(default_factory=UsageStats)
    latency_ms: float = 0.0
    error: LLMError | None = None
    raw_response: dict[str, Any] | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "provider": self.provider.value,
            "model": self.model,
            "content": self.content,
            "success": self.success,
            "usage": self.usage.to_dict(),
            "latency_ms": self.latency_ms,
            "error": self.error.to_dict() if self.error else None,
        }
