"""Tests for LLM providers and the pipeline's LLM capability."""

import json

import httpx
import pytest

from ontologizer.llm.capability import LLMCapability
from ontologizer.llm.models import CompletionRequest, ProviderType, UsageStats
from ontologizer.llm.prompts import build_fanout_prompt, build_recommendation_prompt
from ontologizer.llm.providers import (
    GeminiProvider,
    OpenAIProvider,
    ProviderConfig,
    StubProvider,
    get_provider,
)
from ontologizer.pipeline.context import AnalysisContext


def json_transport(status: int, body: dict) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status, json=body))


class TestUsageStats:
    """Tests for usage accounting."""

    def test_add(self) -> None:
        """Test usage sums field by field."""
        total = UsageStats(1, 2, 3, 0.5).add(UsageStats(10, 20, 30, 0.25))
        assert total == UsageStats(11, 22, 33, 0.75)

    def test_context_accumulates(self) -> None:
        """Test the context keeps a running total."""
        ctx = AnalysisContext()
        ctx.record_usage(UsageStats(100, 50, 150, 0.00125))
        ctx.record_usage(UsageStats(100, 50, 150, 0.00125))
        assert ctx.token_usage == 300
        assert ctx.cost_usd == 0.0025


class TestOpenAIProvider:
    """Tests for the chat completions provider."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """Test content, usage and cost from a 200 reply."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "choices": [{"message": {"content": '{"ok": true}'}}],
                    "usage": {"prompt_tokens": 1000, "completion_tokens": 500, "total_tokens": 1500},
                },
            )

        provider = OpenAIProvider(ProviderConfig(api_key="sk-test", transport=httpx.MockTransport(handler)))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gpt-4o", json_mode=True))

        assert response.success
        assert response.content == '{"ok": true}'
        assert response.usage.total_tokens == 1500
        assert response.usage.estimated_cost_usd == pytest.approx(0.0125)
        assert seen[0].headers["Authorization"] == "Bearer sk-test"
        assert json.loads(seen[0].content)["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_server_error_is_retryable(self) -> None:
        """Test 5xx replies become retryable failures."""
        provider = OpenAIProvider(ProviderConfig(transport=json_transport(503, {"error": "busy"})))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gpt-4o"))

        assert not response.success
        assert response.error.error_type == "api_error"
        assert response.error.retryable

    @pytest.mark.asyncio
    async def test_client_error_not_retryable(self) -> None:
        """Test 4xx replies are not retried."""
        provider = OpenAIProvider(ProviderConfig(transport=json_transport(401, {"error": "key"})))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gpt-4o"))

        assert not response.error.retryable

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test timeouts are reported, not raised."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        provider = OpenAIProvider(ProviderConfig(transport=httpx.MockTransport(handler)))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gpt-4o"))

        assert response.error.error_type == "timeout"

    @pytest.mark.asyncio
    async def test_malformed_reply(self) -> None:
        """Test a reply without choices is an invalid response."""
        provider = OpenAIProvider(ProviderConfig(transport=json_transport(200, {"choices": []})))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gpt-4o"))

        assert response.error.error_type == "invalid_response"

    @pytest.mark.asyncio
    async def test_null_content(self) -> None:
        """Test a reply whose message content is null is not a success."""
        body = {"choices": [{"message": {"content": None}}]}
        provider = OpenAIProvider(ProviderConfig(transport=json_transport(200, body)))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gpt-4o"))

        assert not response.success
        assert response.error.error_type == "empty_response"


class TestGeminiProvider:
    """Tests for the generateContent provider."""

    @pytest.mark.asyncio
    async def test_success_with_sampling_controls(self) -> None:
        """Test text extraction and topK/topP forwarding."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "candidates": [{"content": {"parts": [{"text": "PRIMARY ENTITY: Coffee"}]}}],
                    "usageMetadata": {
                        "promptTokenCount": 10,
                        "candidatesTokenCount": 5,
                        "totalTokenCount": 15,
                    },
                },
            )

        provider = GeminiProvider(ProviderConfig(api_key="g-key", transport=httpx.MockTransport(handler)))
        response = await provider.complete(
            CompletionRequest(prompt="hi", model="gemini-1.5-flash", top_k=20, top_p=0.9)
        )

        assert response.success
        assert response.content == "PRIMARY ENTITY: Coffee"
        assert response.usage.total_tokens == 15
        assert seen[0].url.params["key"] == "g-key"
        config = json.loads(seen[0].content)["generationConfig"]
        assert config["topK"] == 20
        assert config["topP"] == 0.9

    @pytest.mark.asyncio
    async def test_invalid_shape(self) -> None:
        """Test a reply without candidates is an invalid response."""
        provider = GeminiProvider(ProviderConfig(transport=json_transport(200, {"candidates": []})))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gemini-1.5-flash"))

        assert response.error.error_type == "invalid_response"

    @pytest.mark.asyncio
    async def test_null_text(self) -> None:
        """Test a candidate part without text is not a success."""
        body = {"candidates": [{"content": {"parts": [{"text": None}]}}]}
        provider = GeminiProvider(ProviderConfig(transport=json_transport(200, body)))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gemini-1.5-flash"))

        assert not response.success
        assert response.error.error_type == "empty_response"

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        """Test non-200 replies are API errors."""
        provider = GeminiProvider(ProviderConfig(transport=json_transport(500, {})))
        response = await provider.complete(CompletionRequest(prompt="hi", model="gemini-1.5-flash"))

        assert response.error.error_type == "api_error"
        assert response.error.message == "API error: HTTP 500"

    def test_factory(self) -> None:
        """Test provider lookup by type."""
        assert isinstance(get_provider(ProviderType.GEMINI), GeminiProvider)
        assert isinstance(get_provider(ProviderType.STUB), StubProvider)


class TestLLMCapability:
    """Tests for the fail-soft LLM operations."""

    @pytest.mark.asyncio
    async def test_extract_entities(self, entity_stub: StubProvider) -> None:
        """Test the reply is cleaned and usage recorded."""
        entity_stub.set_response(
            json.dumps({"main_topic": " SEO ", "entities": ["Google", " ", 3, "Schema Markup"]})
        )
        ctx = AnalysisContext()

        result = await LLMCapability(entity_provider=entity_stub).extract_entities("text", ctx)

        assert result.main_topic == "SEO"
        assert result.entities == ["Google", "Schema Markup"]
        assert ctx.token_usage == 150
        assert entity_stub.calls[0].json_mode

    @pytest.mark.asyncio
    async def test_missing_entities_list(self, entity_stub: StubProvider) -> None:
        """Test a reply without entities is unusable but still billed."""
        entity_stub.set_response('{"main_topic": "SEO"}')
        ctx = AnalysisContext()

        assert await LLMCapability(entity_provider=entity_stub).extract_entities("text", ctx) is None
        assert ctx.token_usage == 150

    @pytest.mark.asyncio
    async def test_failures_return_none(self, entity_stub: StubProvider) -> None:
        """Test provider failures and missing providers degrade to None."""
        entity_stub.set_failure_mode(True)
        ctx = AnalysisContext()

        assert await LLMCapability(entity_provider=entity_stub).extract_entities("t", ctx) is None
        assert await LLMCapability().extract_entities("t", ctx) is None
        assert ctx.token_usage == 0

    @pytest.mark.asyncio
    async def test_null_model_content_returns_none(self) -> None:
        """Test a null content reply from the chat API degrades to None."""
        body = {"choices": [{"message": {"content": None}}]}
        provider = OpenAIProvider(ProviderConfig(transport=json_transport(200, body)))
        ctx = AnalysisContext()

        assert await LLMCapability(entity_provider=provider).extract_entities("text", ctx) is None
        assert ctx.token_usage == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["[1, 2]", "null", "not json"])
    async def test_non_object_reply_returns_none(self, entity_stub: StubProvider, content: str) -> None:
        """Test replies that are not a JSON object degrade to None."""
        entity_stub.set_response(content)

        assert await LLMCapability(entity_provider=entity_stub).extract_entities("t", AnalysisContext()) is None

    @pytest.mark.asyncio
    async def test_recommendations_normalized(self, entity_stub: StubProvider) -> None:
        """Test object and string items are both accepted."""
        entity_stub.set_response(
            json.dumps(
                {
                    "recommendations": [
                        {"category": "Content Depth", "advice": "Add examples"},
                        "Plain tip",
                        {"category": "Empty"},
                    ]
                }
            )
        )

        items = await LLMCapability(entity_provider=entity_stub).generate_recommendations(
            "body", ["Python"], "", AnalysisContext()
        )

        assert items == [
            {"category": "Content Depth", "advice": "Add examples"},
            {"category": "General", "advice": "Plain tip"},
        ]

    @pytest.mark.asyncio
    async def test_fanout_not_configured(self) -> None:
        """Test a missing fan-out provider yields a failure response."""
        response = await LLMCapability().analyze_fanout("prompt")

        assert not response.success
        assert response.error.error_type == "not_configured"


class TestPrompts:
    """Tests for prompt builders."""

    def test_recommendation_prompt(self) -> None:
        """Test body truncation and the entity list."""
        prompt = build_recommendation_prompt("x" * 5000, ["Python", "Django"], "\n\nCTX")
        assert "x" * 2500 + "..." in prompt
        assert "x" * 2501 not in prompt
        assert "Python, Django\n\nCTX" in prompt

    def test_fanout_prompt(self) -> None:
        """Test the URL line and serialized chunks."""
        prompt = build_fanout_prompt([{"type": "primary_topic", "content": "Café"}], "https://x.test")
        assert "URL: https://x.test" in prompt
        assert '"content": "Café"' in prompt
        assert prompt.rstrip().endswith("RECOMMENDATIONS: [Specific content gaps to fill]")
