"""Content improvement recommendations.

The LLM path is preferred; without a configured provider, or when the
model reply is unusable, a local entity-coverage check stands in.
"""

from typing import Any

import structlog

from ontologizer.enrichment.models import EnrichedEntity
from ontologizer.extraction.text import TextParts
from ontologizer.llm.capability import LLMCapability
from ontologizer.pipeline.context import AnalysisContext

logger = structlog.get_logger(__name__)

MAX_PROMPT_ENTITIES = 5
PROMPT_ENTITY_MIN_CONFIDENCE = 50
MAX_FALLBACK_RECOMMENDATIONS = 5

COVERAGE_CATEGORY = "Entity Coverage"
STRUCTURED_DATA_CATEGORY = "Structured Data"
GOOD_COVERAGE_ADVICE = (
    "Content appears to have good entity coverage. Review the generated JSON-LD for "
    "inclusion in your page schema to improve SEO."
)

# Root-level JSON-LD keys and the feature each one implements
SCHEMA_FEATURES = (
    ("hasPart", "FAQ structured data"),
    ("speakable", "Voice search optimization (speakable)"),
    ("provider", "Provider/organization information"),
    ("knowsAbout", "Knowledge domain specification"),
    ("sameAs", "Entity linking (sameAs)"),
)


def implemented_schema_types(json_ld: dict[str, Any]) -> list[str]:
    types = []
    if json_ld.get("@type"):
        types.append(json_ld["@type"])
    main_entity = json_ld.get("mainEntity")
    if isinstance(main_entity, list):
        types.extend(e["@type"] for e in main_entity if isinstance(e, dict) and e.get("@type"))
    elif isinstance(main_entity, dict) and main_entity.get("@type"):
        types.append(main_entity["@type"])
    return list(dict.fromkeys(types))


def schema_context(json_ld: dict[str, Any] | None) -> str:
    """Prompt block listing structured data the page already carries."""
    if not json_ld:
        return ""

    types = implemented_schema_types(json_ld)
    features = [label for key, label in SCHEMA_FEATURES if key in json_ld]
    if not types and not features:
        return ""

    lines = []
    if types:
        lines.append("Schema types: " + ", ".join(types))
    if features:
        lines.append("Features: " + ", ".join(features))
    return (
        "\n\n**Already Implemented Structured Data:**\n"
        + "\n".join(lines)
        + "\n\n**IMPORTANT:** Do NOT recommend implementing any of the above schema types or "
        "features as they are already active on this page."
    )


def coverage_recommendations(parts: TextParts, entities: list[EnrichedEntity]) -> list[dict[str, str]]:
    """Flag entities the body barely mentions."""
    body_lc = parts.body.lower()
    recommendations = [
        {
            "category": COVERAGE_CATEGORY,
            "advice": (
                f"Consider expanding coverage of '{entity.name}' with additional context, "
                "examples, or data to build more topical authority."
            ),
        }
        for entity in entities
        if body_lc.count(entity.name.lower()) <= 1
    ]
    if not recommendations:
        recommendations.append({"category": STRUCTURED_DATA_CATEGORY, "advice": GOOD_COVERAGE_ADVICE})
    return recommendations[:MAX_FALLBACK_RECOMMENDATIONS]


class RecommendationGenerator:
    def __init__(self, llm: LLMCapability):
        self.llm = llm

    async def recommend(
        self,
        parts: TextParts,
        entities: list[EnrichedEntity],
        json_ld: dict[str, Any] | None,
        ctx: AnalysisContext,
    ) -> list[dict[str, str]]:
        """
        Produce ordered ``{category, advice}`` recommendations.

        Args:
            parts: Extracted page text
            entities: Enriched entities, highest confidence first
            json_ld: The synthesized schema, used to avoid redundant advice
            ctx: Analysis context for LLM usage accounting

        Returns:
            Recommendations from the model, or the local fallback
        """
        if self.llm.entities_available:
            top = [e.name for e in entities if e.confidence_score > PROMPT_ENTITY_MIN_CONFIDENCE]
            recommendations = await self.llm.generate_recommendations(
                parts.body,
                top[:MAX_PROMPT_ENTITIES],
                schema_context(json_ld),
                ctx,
            )
            if recommendations is not None:
                logger.info("recommendations_generated", source="llm", count=len(recommendations))
                return recommendations
            logger.info("recommendations_fallback")

        recommendations = coverage_recommendations(parts, entities)
        logger.info("recommendations_generated", source="heuristic", count=len(recommendations))
        return recommendations
