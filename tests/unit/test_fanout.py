"""Tests for semantic chunking and query fan-out analysis."""

import pytest

from ontologizer.fanout.analyzer import FanoutAnalyzer, parse_fanout_response
from ontologizer.fanout.chunker import SemanticChunk, extract_semantic_chunks
from ontologizer.llm.capability import LLMCapability
from ontologizer.llm.providers import StubProvider
from tests.fixtures.pages import FANOUT_REPLY, SEO_GUIDE_HTML

LD_JSON_HTML = """<html><head><title>Acme</title>
<script type="application/ld+json">{"@type": ["Organization", "Brand"], "name": "Acme"}</script>
<script type="application/ld+json">{not json</script>
</head><body></body></html>
"""


class TestSemanticChunks:
    """Tests for layout-aware chunking."""

    def test_empty(self) -> None:
        """Test empty markup yields no chunks."""
        assert extract_semantic_chunks("") == []

    def test_page_layout(self) -> None:
        """Test primary topic, sections and lists in order."""
        chunks = extract_semantic_chunks(SEO_GUIDE_HTML)

        assert [c.type for c in chunks] == ["primary_topic", "section", "section", "list"]
        assert chunks[0].content == "Technical SEO Guide for Universities Technical SEO Guide"
        assert chunks[1].heading == "Schema Markup Basics"
        assert chunks[1].content.startswith("Schema Markup describes pages to Google.")
        assert chunks[3].content == "Audit crawl errors | Fix duplicate titles | Add structured data"

    def test_structured_data(self) -> None:
        """Test ld+json blocks are summarized and bad ones skipped."""
        chunks = extract_semantic_chunks(LD_JSON_HTML)

        structured = [c for c in chunks if c.type == "structured_data"]
        assert len(structured) == 1
        assert structured[0].content.startswith("Type: Organization, Brand, {")

    def test_to_dict(self) -> None:
        """Test the heading key only appears on sections."""
        assert SemanticChunk(type="list", content="a").to_dict() == {"type": "list", "content": "a"}
        assert SemanticChunk(type="section", content="b", heading="H").to_dict() == {
            "type": "section",
            "heading": "H",
            "content": "b",
        }


class TestParseFanoutResponse:
    """Tests for parsing the sectioned reply."""

    def test_sections(self) -> None:
        """Test every section is attributed correctly."""
        report = parse_fanout_response(FANOUT_REPLY)

        assert report.primary_entity == "Cold Brew Coffee"
        assert report.queries == [
            {"query": "How long does cold brew steep?", "coverage": "Yes"},
            {"query": "Is cold brew less acidic", "coverage": "Partial"},
            {"query": "Best beans for cold brew", "coverage": "Unknown"},
        ]
        assert report.followups == ["Can I heat cold brew?", "How long does it keep?"]
        assert report.coverage_score == "2/3 queries covered"
        assert report.recommendations == "Add a section on storage. Mention bean origins."

    def test_unstructured_text(self) -> None:
        """Test free text yields an empty report."""
        report = parse_fanout_response("The model rambled without sections.")
        assert report.to_dict() == {
            "primary_entity": "",
            "queries": [],
            "followups": [],
            "coverage_score": "",
            "recommendations": "",
        }


class TestFanoutAnalyzer:
    """Tests for the fan-out analysis operation."""

    @pytest.mark.asyncio
    async def test_not_configured(self) -> None:
        """Test a missing model is reported as an error."""
        result = await FanoutAnalyzer(LLMCapability()).analyze(SEO_GUIDE_HTML)

        assert result == {"error": "Gemini API key not configured"}

    @pytest.mark.asyncio
    async def test_failure(self, fanout_stub: StubProvider) -> None:
        """Test model failures carry the chunk count."""
        fanout_stub.set_failure_mode(True)

        result = await FanoutAnalyzer(LLMCapability(fanout_provider=fanout_stub)).analyze(SEO_GUIDE_HTML)

        assert result == {"error": "Simulated failure", "chunks_extracted": 4}

    @pytest.mark.asyncio
    async def test_empty_reply(self, fanout_stub: StubProvider) -> None:
        """Test an empty reply is a failure."""
        fanout_stub.set_response("")

        result = await FanoutAnalyzer(LLMCapability(fanout_provider=fanout_stub)).analyze(SEO_GUIDE_HTML)

        assert result["error"] == "Failed to generate fan-out analysis"

    @pytest.mark.asyncio
    async def test_success(self, fanout_stub: StubProvider) -> None:
        """Test the parsed report with raw analysis and chunks."""
        fanout_stub.set_response(FANOUT_REPLY)
        analyzer = FanoutAnalyzer(LLMCapability(fanout_provider=fanout_stub))

        result = await analyzer.analyze(SEO_GUIDE_HTML, "https://example.com/seo")

        assert result["primary_entity"] == "Cold Brew Coffee"
        assert len(result["queries"]) == 3
        assert result["analysis"] == FANOUT_REPLY
        assert result["chunks_extracted"] == 4
        assert result["chunks"][0]["type"] == "primary_topic"

        request = fanout_stub.calls[0]
        assert "URL: https://example.com/seo" in request.prompt
        assert request.top_k == 20
        assert request.model == "gemini-1.5-flash"
