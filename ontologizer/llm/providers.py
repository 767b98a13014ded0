"""LLM completion providers - unified interface over OpenAI and Gemini."""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
import structlog

from ontologizer.llm.models import (
    CompletionRequest,
    CompletionResponse,
    LLMError,
    ProviderType,
    UsageStats,
)

logger = structlog.get_logger(__name__)


@dataclass
class ProviderConfig:
    """Configuration for a completion provider."""

    api_key: str = ""
    base_url: str = ""
    timeout_seconds: float = 45.0
    transport: httpx.AsyncBaseTransport | None = None


class CompletionProvider(ABC):
    """Abstract base class for completion providers."""

    provider_type: ProviderType

    # Pricing per 1M tokens: (input, output)
    pricing: dict[str, tuple[float, float]] = {}
    default_pricing: tuple[float, float] = (0.0, 0.0)

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a single completion request."""
        ...

    def _estimate_cost(self, model: str, usage: UsageStats) -> float:
        """Estimate cost based on model and usage."""
        input_price, output_price = self.pricing.get(model, self.default_pricing)
        return (usage.prompt_tokens / 1_000_000) * input_price + (
            usage.completion_tokens / 1_000_000
        ) * output_price

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self.config.transport,
        )

    def _failure(
        self,
        request: CompletionRequest,
        start_time: float,
        error_type: str,
        message: str,
        retryable: bool = True,
    ) -> CompletionResponse:
        return CompletionResponse(
            provider=self.provider_type,
            model=request.model,
            content="",
            success=False,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            error=LLMError(
                provider=self.provider_type,
                error_type=error_type,
                message=message,
                retryable=retryable,
            ),
        )


class OpenAIProvider(CompletionProvider):
    """OpenAI chat completions provider, used for entities and recommendations."""

    provider_type = ProviderType.OPENAI

    # GPT-4o at $5 input / $15 output per 1M tokens
    pricing = {
        "gpt-4o": (5.0, 15.0),
        "gpt-4o-mini": (0.15, 0.6),
        "gpt-4-turbo": (10.0, 30.0),
    }
    default_pricing = (5.0, 15.0)

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if not config.base_url:
            config.base_url = "https://api.openai.com/v1"

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a chat completion."""
        start_time = time.perf_counter()

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        payload: dict = {
            "model": request.model,
            "messages": [{"role": "user", "content": request.prompt}],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        if request.json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.config.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                )

            if response.status_code != 200:
                return self._failure(
                    request,
                    start_time,
                    "api_error",
                    f"HTTP {response.status_code}: {response.text[:500]}",
                    retryable=response.status_code >= 500,
                )

            data = response.json()
            content = data["choices"][0]["message"]["content"]
            if not isinstance(content, str):
                return self._failure(
                    request, start_time, "empty_response", "Model returned no content", False
                )
            usage_data = data.get("usage", {})

            usage = UsageStats(
                prompt_tokens=usage_data.get("prompt_tokens", 0),
                completion_tokens=usage_data.get("completion_tokens", 0),
                total_tokens=usage_data.get("total_tokens", 0),
            )
            usage.estimated_cost_usd = self._estimate_cost(request.model, usage)

            return CompletionResponse(
                provider=self.provider_type,
                model=request.model,
                content=content,
                raw_response=data,
                usage=usage,
                latency_ms=(time.perf_counter() - start_time) * 1000,
                success=True,
            )

        except httpx.TimeoutException:
            return self._failure(
                request,
                start_time,
                "timeout",
                f"Request timed out after {self.config.timeout_seconds}s",
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            return self._failure(
                request, start_time, "invalid_response", f"Malformed response: {e}", False
            )
        except httpx.HTTPError as e:
            return self._failure(request, start_time, "exception", str(e))


class GeminiProvider(CompletionProvider):
    """Google Gemini generateContent provider, used for fan-out analysis."""

    provider_type = ProviderType.GEMINI

    pricing = {
        "gemini-1.5-flash": (0.075, 0.3),
        "gemini-1.5-pro": (1.25, 5.0),
    }
    default_pricing = (0.075, 0.3)

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if not config.base_url:
            config.base_url = "https://generativelanguage.googleapis.com/v1beta"

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a generateContent call."""
        start_time = time.perf_counter()

        generation_config: dict = {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_tokens,
        }
        if request.top_k is not None:
            generation_config["topK"] = request.top_k
        if request.top_p is not None:
            generation_config["topP"] = request.top_p

        payload = {
            "contents": [{"parts": [{"text": request.prompt}]}],
            "generationConfig": generation_config,
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.config.base_url}/models/{request.model}:generateContent",
                    params={"key": self.config.api_key},
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.warning("gemini_request_failed", error=str(e))
            return self._failure(request, start_time, "exception", f"API request failed: {e}")

        if response.status_code != 200:
            logger.warning(
                "gemini_http_error",
                status_code=response.status_code,
                body=response.text[:500],
            )
            return self._failure(
                request,
                start_time,
                "api_error",
                f"API error: HTTP {response.status_code}",
                retryable=response.status_code >= 500,
            )

        try:
            data = response.json()
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError):
            logger.warning("gemini_invalid_response", body=response.text[:500])
            return self._failure(
                request, start_time, "invalid_response", "Invalid API response format", False
            )
        if not isinstance(content, str):
            return self._failure(
                request, start_time, "empty_response", "Model returned no content", False
            )

        usage_data = data.get("usageMetadata", {})
        usage = UsageStats(
            prompt_tokens=usage_data.get("promptTokenCount", 0),
            completion_tokens=usage_data.get("candidatesTokenCount", 0),
            total_tokens=usage_data.get("totalTokenCount", 0),
        )
        usage.estimated_cost_usd = self._estimate_cost(request.model, usage)

        return CompletionResponse(
            provider=self.provider_type,
            model=request.model,
            content=content,
            raw_response=data,
            usage=usage,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            success=True,
        )


class StubProvider(CompletionProvider):
    """Deterministic provider for testing."""

    provider_type = ProviderType.STUB

    def __init__(self, config: ProviderConfig | None = None):
        super().__init__(config or ProviderConfig())
        self.responses: list[str] = []
        self.default_response: str = "{}"
        self.should_fail: bool = False
        self.fail_count: int = 0
        self.calls: list[CompletionRequest] = []

    def set_response(self, content: str) -> None:
        """Set the response returned when no queued response is left."""
        self.default_response = content

    def queue_response(self, content: str) -> None:
        """Queue a response for the next unanswered call."""
        self.responses.append(content)

    def set_failure_mode(self, should_fail: bool, fail_count: int = 1) -> None:
        """Configure failure behavior."""
        self.should_fail = should_fail
        self.fail_count = fail_count

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Return the next canned response."""
        self.calls.append(request)

        if self.should_fail and self.fail_count > 0:
            self.fail_count -= 1
            return CompletionResponse(
                provider=self.provider_type,
                model=request.model,
                content="",
                success=False,
                latency_ms=1.0,
                error=LLMError(
                    provider=self.provider_type,
                    error_type="stub_failure",
                    message="Simulated failure",
                ),
            )

        content = self.responses.pop(0) if self.responses else self.default_response

        usage = UsageStats(prompt_tokens=100, completion_tokens=50, total_tokens=150)
        usage.estimated_cost_usd = 0.00125

        return CompletionResponse(
            provider=self.provider_type,
            model=request.model,
            content=content,
            usage=usage,
            latency_ms=1.0,
            success=True,
        )


def get_provider(
    provider_type: ProviderType,
    config: ProviderConfig | None = None,
) -> CompletionProvider:
    """Factory function to get a completion provider."""
    if config is None:
        config = ProviderConfig()

    providers: dict[ProviderType, type[CompletionProvider]] = {
        ProviderType.OPENAI: OpenAIProvider,
        ProviderType.GEMINI: GeminiProvider,
        ProviderType.STUB: StubProvider,
    }

    provider_class = providers.get(provider_type)
    if provider_class is None:
        raise ValueError(f"Unknown provider type: {provider_type}")

    return provider_class(config)
