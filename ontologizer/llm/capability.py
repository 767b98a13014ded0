"""LLM capability used by the analysis pipeline.

Wraps the configured providers behind three narrow operations. Every
operation fails soft: a transport error, timeout or malformed reply is
logged and reported as ``None`` (or an error response for fan-out) so the
caller can fall back to its heuristic path.
"""

import json
from dataclasses import dataclass

import structlog

from ontologizer.llm.models import CompletionRequest, CompletionResponse, LLMError, ProviderType
from ontologizer.llm.prompts import build_entity_prompt, build_recommendation_prompt
from ontologizer.llm.providers import CompletionProvider
from ontologizer.pipeline.context import AnalysisContext

logger = structlog.get_logger(__name__)


@dataclass
class EntityExtraction:
    """Main topic and entity strings returned by the model."""

    main_topic: str
    entities: list[str]


class LLMCapability:
    """Entity extraction, recommendations and fan-out over LLM providers."""

    def __init__(
        self,
        entity_provider: CompletionProvider | None = None,
        fanout_provider: CompletionProvider | None = None,
        entity_model: str = "gpt-4o",
        fanout_model: str = "gemini-1.5-flash",
    ):
        self.entity_provider = entity_provider
        self.fanout_provider = fanout_provider
        self.entity_model = entity_model
        self.fanout_model = fanout_model

    @property
    def entities_available(self) -> bool:
        return self.entity_provider is not None

    @property
    def fanout_available(self) -> bool:
        return self.fanout_provider is not None

    async def _complete_json(
        self, prompt: str, ctx: AnalysisContext, operation: str
    ) -> dict | None:
        if self.entity_provider is None:
            return None

        response = await self.entity_provider.complete(
            CompletionRequest(
                prompt=prompt,
                model=self.entity_model,
                max_tokens=1000,
                temperature=0.3,
                json_mode=True,
            )
        )

        if not response.success:
            logger.warning(
                f"llm_{operation}_failed",
                error=response.error.message if response.error else None,
            )
            return None

        ctx.record_usage(response.usage)

        try:
            content = json.loads(response.content)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"llm_{operation}_invalid_json", error=str(e))
            return None

        if not isinstance(content, dict):
            logger.warning(f"llm_{operation}_invalid_json", error="not an object")
            return None
        return content

    async def extract_entities(self, text: str, ctx: AnalysisContext) -> EntityExtraction | None:
        """
        Ask the model for the main topic and notable entities of a page.

        Returns None when no provider is configured or the reply lacks an
        ``entities`` list.
        """
        content = await self._complete_json(build_entity_prompt(text), ctx, "extraction")
        if content is None:
            return None

        entities = content.get("entities")
        if not isinstance(entities, list):
            logger.warning("llm_extraction_failed", error="missing entities list")
            return None

        names = [e.strip() for e in entities if isinstance(e, str) and e.strip()]
        main_topic = content.get("main_topic")
        main_topic = main_topic.strip() if isinstance(main_topic, str) else ""

        logger.info("llm_entities_extracted", main_topic=main_topic, count=len(names))
        return EntityExtraction(main_topic=main_topic, entities=names)

    async def generate_recommendations(
        self,
        body: str,
        entity_names: list[str],
        schema_context: str,
        ctx: AnalysisContext,
    ) -> list[dict] | None:
        """Ask the model for categorized content recommendations."""
        prompt = build_recommendation_prompt(body, entity_names, schema_context)
        content = await self._complete_json(prompt, ctx, "recommendations")
        if content is None:
            return None

        recommendations = content.get("recommendations")
        if not isinstance(recommendations, list):
            logger.warning("llm_recommendations_failed", error="missing recommendations list")
            return None

        items = []
        for item in recommendations:
            if isinstance(item, dict) and item.get("advice"):
                items.append(
                    {
                        "category": str(item.get("category") or "General"),
                        "advice": str(item["advice"]),
                    }
                )
            elif isinstance(item, str) and item.strip():
                items.append({"category": "General", "advice": item.strip()})
        return items

    async def analyze_fanout(self, prompt: str) -> CompletionResponse:
        """Send the fan-out prompt; the caller handles failure responses."""
        if self.fanout_provider is None:
            return CompletionResponse(
                provider=ProviderType.GEMINI,
                model=self.fanout_model,
                content="",
                success=False,
                error=LLMError(
                    provider=ProviderType.GEMINI,
                    error_type="not_configured",
                    message="Gemini API key not configured",
                    retryable=False,
                ),
            )

        return await self.fanout_provider.complete(
            CompletionRequest(
                prompt=prompt,
                model=self.fanout_model,
                max_tokens=2048,
                temperature=0.3,
                top_k=20,
                top_p=0.9,
            )
        )
