"""Tests for content recommendations."""

import json

import pytest

from ontologizer.enrichment.models import EnrichedEntity
from ontologizer.extraction.text import TextParts
from ontologizer.llm.capability import LLMCapability
from ontologizer.llm.providers import StubProvider
from ontologizer.pipeline.context import AnalysisContext
from ontologizer.recommendations.generator import (
    RecommendationGenerator,
    coverage_recommendations,
    schema_context,
)

PARTS = TextParts(title="Python", body="Python is great. Python rocks. Django appears once.")


def entity(name: str, confidence: int) -> EnrichedEntity:
    return EnrichedEntity(name=name, confidence_score=confidence)


class TestSchemaContext:
    """Tests for the already-implemented structured data block."""

    def test_empty(self) -> None:
        """Test no schema means no prompt block."""
        assert schema_context(None) == ""
        assert schema_context({}) == ""

    def test_types_and_features(self) -> None:
        """Test root and main entity types plus known features are listed."""
        context = schema_context(
            {
                "@type": "WebPage",
                "mainEntity": {"@type": "Article"},
                "speakable": {},
                "sameAs": [],
            }
        )

        assert "Schema types: WebPage, Article" in context
        assert "Features: Voice search optimization (speakable), Entity linking (sameAs)" in context
        assert "Do NOT recommend" in context


class TestCoverageRecommendations:
    """Tests for the local fallback."""

    def test_thin_entities_flagged(self) -> None:
        """Test entities mentioned at most once get coverage advice."""
        recommendations = coverage_recommendations(PARTS, [entity("Python", 60), entity("Django", 60)])

        assert len(recommendations) == 1
        assert recommendations[0]["category"] == "Entity Coverage"
        assert "'Django'" in recommendations[0]["advice"]

    def test_good_coverage(self) -> None:
        """Test the structured data pointer when coverage is fine."""
        recommendations = coverage_recommendations(PARTS, [entity("Python", 60)])

        assert [r["category"] for r in recommendations] == ["Structured Data"]

    def test_capped_at_five(self) -> None:
        """Test at most five fallback recommendations."""
        entities = [entity(f"Missing {i}", 60) for i in range(8)]
        assert len(coverage_recommendations(PARTS, entities)) == 5


class TestRecommendationGenerator:
    """Tests for choosing between the model and the fallback."""

    @pytest.mark.asyncio
    async def test_heuristic_without_model(self) -> None:
        """Test the fallback runs when no model is configured."""
        generator = RecommendationGenerator(LLMCapability())

        recommendations = await generator.recommend(PARTS, [entity("Django", 60)], None, AnalysisContext())

        assert recommendations[0]["category"] == "Entity Coverage"

    @pytest.mark.asyncio
    async def test_model_recommendations(self, entity_stub: StubProvider) -> None:
        """Test model advice is returned and the prompt lists strong entities."""
        entity_stub.set_response(
            json.dumps({"recommendations": [{"category": "Semantic Gaps", "advice": "Cover Flask"}]})
        )
        entities = [entity("Python", 90), entity("Weak Thing", 40)]
        ctx = AnalysisContext()

        recommendations = await RecommendationGenerator(
            LLMCapability(entity_provider=entity_stub)
        ).recommend(PARTS, entities, {"@type": "WebPage", "speakable": {}}, ctx)

        assert recommendations == [{"category": "Semantic Gaps", "advice": "Cover Flask"}]
        prompt = entity_stub.calls[0].prompt
        assert "Python" in prompt
        assert "Weak Thing" not in prompt
        assert "Schema types: WebPage" in prompt
        assert ctx.token_usage == 150

    @pytest.mark.asyncio
    async def test_unusable_reply_falls_back(self, entity_stub: StubProvider) -> None:
        """Test a reply without recommendations uses the fallback."""
        recommendations = await RecommendationGenerator(
            LLMCapability(entity_provider=entity_stub)
        ).recommend(PARTS, [entity("Django", 60)], None, AnalysisContext())

        assert recommendations[0]["category"] == "Entity Coverage"
