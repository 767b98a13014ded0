"""Tests for entity candidate generation."""

import json

import pytest

from ontologizer.candidates.generator import (
    CandidateGenerator,
    CandidateSource,
    dedupe_by_canonical_key,
)
from ontologizer.candidates.heuristics import (
    MainTopicStrategy,
    choose_main_topic,
    expand_sub_phrases,
    extract_basic_candidates,
    inject_topic_entities,
    mine_ngrams,
    rank_candidates,
    salience_score,
    topic_phrases,
)
from ontologizer.candidates.synonyms import dedupe_key, entity_variants, normalize_entity
from ontologizer.extraction.text import TextParts, extract_text_parts
from ontologizer.llm.capability import LLMCapability
from ontologizer.llm.providers import StubProvider
from ontologizer.pipeline.context import AnalysisContext
from tests.fixtures.pages import SEO_GUIDE_HTML


class TestSynonyms:
    """Tests for the synonym table."""

    def test_normalize_aliases(self) -> None:
        """Test aliases share one canonical key."""
        assert normalize_entity("SEO") == "seo"
        assert normalize_entity("Search Engine Optimization") == "seo"
        assert normalize_entity("  Pay Per Click ") == "ppc"

    def test_normalize_unknown(self) -> None:
        """Test unknown entities normalize to their lowercased form."""
        assert normalize_entity("Plumbing") == "plumbing"

    def test_variants(self) -> None:
        """Test every surface form of an alias group is returned."""
        assert set(entity_variants("seo")) == {"seo", "search engine optimization"}
        assert entity_variants("Plumbing") == ("plumbing",)

    def test_dedupe_keeps_first_surface_form(self) -> None:
        """Test synonym de-duplication keeps the earliest candidate."""
        result = dedupe_by_canonical_key(["Search Engine Optimization", "Link Building", "SEO"])
        assert result == ["Search Engine Optimization", "Link Building"]

    def test_dedupe_keeps_broad_group_members(self) -> None:
        """Test one-way synonym groups never merge distinct candidates."""
        result = dedupe_by_canonical_key(["University", "College", "Higher Education", "university"])
        assert result == ["University", "College", "Higher Education"]

    def test_dedupe_key(self) -> None:
        """Test only abbreviation pairs share a key."""
        assert dedupe_key("PPC") == dedupe_key("pay per click") == "ppc"
        assert dedupe_key("Online Marketing") == "online marketing"
        assert dedupe_key("Digital Marketing") == "digital marketing"
        assert dedupe_key(" College ") == "college"


class TestBasicExtraction:
    """Tests for regex candidate extraction."""

    def test_capitalized_phrases(self) -> None:
        """Test capitalized runs are extracted and common words dropped."""
        assert extract_basic_candidates("Apple. The. Microsoft Windows.") == [
            "Apple",
            "Microsoft Windows",
        ]

    def test_short_and_numeric_tokens_dropped(self) -> None:
        """Test tokens of two characters or fewer never appear."""
        assert extract_basic_candidates("A. 42. Go.") == []

    def test_duplicates_removed(self) -> None:
        """Test repeated phrases are returned once."""
        assert extract_basic_candidates("Chicago. Chicago. Chicago.") == ["Chicago"]


class TestRanking:
    """Tests for salience ranking."""

    def test_salience_weights(self) -> None:
        """Test title, meta, heading and body weights add up."""
        parts = TextParts(
            title="Pizza Guide",
            meta="Pizza tips",
            headings=["Pizza dough", "Toppings"],
            body="pizza pizza",
        )
        assert salience_score("Pizza", parts) == 30 + 15 + 10 + 2 * 2

    def test_rank_is_stable(self) -> None:
        """Test equal scores keep their original order."""
        parts = TextParts(title="Gamma", body="alpha beta")
        assert rank_candidates(["Alpha", "Beta", "Gamma"], parts) == ["Gamma", "Alpha", "Beta"]


class TestPostProcessing:
    """Tests for topic injection, sub-phrase expansion and n-grams."""

    def test_topic_table_selection(self) -> None:
        """Test the last matching topic table wins."""
        assert "Schema Markup" in topic_phrases("Technical SEO")
        assert "Higher Education" in topic_phrases("SEO for education")
        assert topic_phrases("Gardening") == ()

    def test_inject_only_present_phrases(self) -> None:
        """Test curated phrases are added only when they appear on the page."""
        parts = TextParts(title="Keyword Research Tips", body="Schema Markup matters.")
        result = inject_topic_entities(["Keyword Research"], parts, "seo")
        assert result == ["Keyword Research", "Schema Markup"]

    def test_inject_skips_contained_phrases(self) -> None:
        """Test a phrase contained in an existing candidate is skipped."""
        parts = TextParts(title="Schema Markup Guide")
        result = inject_topic_entities(["Schema Markup Guide"], parts, "seo")
        assert result == ["Schema Markup Guide"]

    def test_expand_sub_phrases(self) -> None:
        """Test sub-phrases found in title, meta or headings are appended."""
        parts = TextParts(title="Excel Course Online")
        result = expand_sub_phrases(["Advanced Excel Course"], parts)
        assert result == ["Advanced Excel Course", "Excel", "Excel Course", "Course"]

    def test_mine_ngrams_from_title_and_url(self) -> None:
        """Test capitalized n-grams are mined from the title and URL path."""
        parts = TextParts(title="Best Pizza Places in Chicago")
        result = mine_ngrams(["Pizza"], parts, "https://example.com/Deep-Dish-Pizza")
        assert result == ["Pizza", "Best Pizza Places", "Deep Dish Pizza"]


class TestChooseMainTopic:
    """Tests for main-topic selection without an LLM."""

    def test_program_phrase_in_title_wins(self) -> None:
        """Test a course/program title phrase beats every strategy."""
        parts = TextParts(title="Advanced Excel Course - Learn Online")
        for strategy in MainTopicStrategy:
            assert choose_main_topic(["Excel"], parts, strategy) == "Advanced Excel Course"

    def test_strict_uses_first_candidate(self) -> None:
        """Test the strict strategy keeps the top-ranked candidate."""
        parts = TextParts(title="Technical SEO Guide for Universities")
        assert choose_main_topic(["Guide", "Technical SEO Guide"], parts) == "Guide"

    def test_title_strategy_prefers_longest_in_title(self) -> None:
        """Test the title strategy picks the longest candidate in the title."""
        parts = TextParts(title="Technical SEO Guide for Universities")
        result = choose_main_topic(["Guide", "Technical SEO Guide", "Budget"], parts, "title")
        assert result == "Technical SEO Guide"

    def test_frequent_strategy(self) -> None:
        """Test the frequent strategy picks the most mentioned candidate."""
        parts = TextParts(title="Recipes", body="pasta bread pasta pasta bread")
        assert choose_main_topic(["Bread", "Pasta"], parts, "frequent") == "Pasta"

    def test_pattern_strategy(self) -> None:
        """Test the pattern strategy uses the first title-case run."""
        parts = TextParts(title="Learn Data Science Today")
        assert choose_main_topic(["Python"], parts, "pattern") == "Learn Data Science Today"

    def test_no_candidates(self) -> None:
        """Test an empty candidate list yields an empty topic."""
        assert choose_main_topic([], TextParts(title="nothing here")) == ""


class TestCandidateGenerator:
    """Tests for the candidate generator."""

    @pytest.mark.asyncio
    async def test_heuristic_path_without_llm(self) -> None:
        """Test regex extraction runs when no model is configured."""
        parts = extract_text_parts(SEO_GUIDE_HTML)
        result = await CandidateGenerator(LLMCapability()).generate(parts, AnalysisContext())

        assert result.source == CandidateSource.HEURISTIC
        assert result.candidates
        assert result.primary_topic

    @pytest.mark.asyncio
    async def test_llm_path(self) -> None:
        """Test model entities lead the list and synonyms collapse."""
        stub = StubProvider()
        stub.set_response(
            json.dumps(
                {
                    "main_topic": "Technical SEO",
                    "entities": [
                        "Technical SEO",
                        "Schema Markup",
                        "Search Engine Optimization",
                        "SEO",
                    ],
                }
            )
        )
        ctx = AnalysisContext()
        parts = extract_text_parts(SEO_GUIDE_HTML)

        result = await CandidateGenerator(LLMCapability(entity_provider=stub)).generate(parts, ctx)

        assert result.source == CandidateSource.LLM
        assert result.primary_topic == "Technical SEO"
        assert result.candidates[:3] == [
            "Technical SEO",
            "Schema Markup",
            "Search Engine Optimization",
        ]
        assert "SEO" not in result.candidates
        assert ctx.token_usage == 150

    @pytest.mark.asyncio
    async def test_llm_failure_falls_back(self) -> None:
        """Test a failed model call falls back to heuristics."""
        stub = StubProvider()
        stub.set_failure_mode(True)
        parts = extract_text_parts(SEO_GUIDE_HTML)

        result = await CandidateGenerator(LLMCapability(entity_provider=stub)).generate(
            parts, AnalysisContext()
        )

        assert result.source == CandidateSource.HEURISTIC
        assert len(stub.calls) == 1

    @pytest.mark.asyncio
    async def test_unparseable_reply_falls_back(self) -> None:
        """Test a reply that is not JSON falls back to heuristics."""
        stub = StubProvider()
        stub.set_response("Sure! Here are the entities: SEO, Google")
        parts = extract_text_parts(SEO_GUIDE_HTML)

        result = await CandidateGenerator(LLMCapability(entity_provider=stub)).generate(
            parts, AnalysisContext()
        )

        assert result.source == CandidateSource.HEURISTIC
