"""Tests for enrichment rule tables, match scoring and confidence."""

from ontologizer.enrichment.matching import (
    extract_supports_entity,
    label_match_score,
    select_best,
    title_match_score,
    title_min_score,
    title_penalties,
)
from ontologizer.enrichment.models import EnrichedEntity, MatchCandidate
from ontologizer.enrichment.rules import (
    is_irrelevant_title,
    is_title_mismatch,
    is_wikidata_mismatch,
    prefilter_reason,
    wikidata_queries,
    wikipedia_queries,
    word_count,
)
from ontologizer.enrichment.scoring import (
    calculate_confidence,
    positional_relevance,
    round_half_up,
)

KG_MID_URL = "https://www.google.com/search?kgmid=/m/05z1_"
KG_SEARCH_URL = "https://www.google.com/search?q=Python"


class TestPrefilter:
    """Tests for pre-lookup entity rejection."""

    def test_six_words_rejected(self) -> None:
        """Test entities longer than five words are rejected."""
        assert prefilter_reason("one two three four five six") == "too_many_words"

    def test_five_words_allowed(self) -> None:
        """Test five-word entities pass the length rule."""
        assert prefilter_reason("Chicago O'Hare International Airport Shuttle") is None

    def test_apostrophes_count_as_one_word(self) -> None:
        """Test inner apostrophes and hyphens do not split words."""
        assert word_count("O'Hare on-page") == 2

    def test_unlikely_encyclopedia_page(self) -> None:
        """Test industry jargon without articles is rejected."""
        assert prefilter_reason("Technical SEO") == "unlikely_encyclopedia_page"

    def test_non_entity(self) -> None:
        """Test UI chrome and abstract nouns are rejected."""
        assert prefilter_reason("Pricing Plans") == "non_entity"
        assert prefilter_reason("Innovation") == "non_entity"

    def test_template_literal(self) -> None:
        """Test social and template names are rejected."""
        assert prefilter_reason("Facebook") == "template_literal"

    def test_generic_single_word(self) -> None:
        """Test generic single words are rejected."""
        assert prefilter_reason("Services") == "generic_term"

    def test_real_entity_passes(self) -> None:
        """Test an ordinary named entity passes every rule."""
        assert prefilter_reason("Google") is None


class TestTitleRules:
    """Tests for Wikipedia title rejection tables."""

    def test_seo_never_matches_seoul(self) -> None:
        """Test the SEO/Seoul mismatch."""
        assert is_title_mismatch("seo", "seoul")
        assert is_title_mismatch("ai seo", "ai seoul summit")
        assert not is_title_mismatch("seo", "search engine optimization")

    def test_noise_titles(self) -> None:
        """Test noise titles are skipped unless they match exactly."""
        assert is_irrelevant_title("mercury", "mercury (planet)")
        assert not is_irrelevant_title("mercury (planet)", "mercury (planet)")
        assert not is_irrelevant_title("python", "python programming language")

    def test_wikidata_research_paper_labels(self) -> None:
        """Test location-specific and paper-like labels are rejected."""
        assert is_wikidata_mismatch("nursing education in new zealand", "")
        assert is_wikidata_mismatch("word " * 30, "")
        assert not is_wikidata_mismatch("python", "general-purpose programming language")


class TestQueryRewriting:
    """Tests for search query rewriting."""

    def test_seo_expands_to_full_name(self) -> None:
        """Test SEO is searched by its expansion first."""
        queries = wikipedia_queries("SEO")
        assert queries[0].text == "Search Engine Optimization"
        assert queries[-1].text == "SEO"
        assert queries[-1].limit == 10

    def test_ohare_aliases(self) -> None:
        """Test O'Hare aliases map to the airport article."""
        for alias in ("O'Hare", "ohare airport", "O'Hare Airport"):
            assert [q.text for q in wikipedia_queries(alias)] == ["O'Hare International Airport"]

    def test_airport_suffix(self) -> None:
        """Test other airports are searched as international airports."""
        assert [q.text for q in wikipedia_queries("Denver Airport")] == [
            "Denver International Airport"
        ]

    def test_academic_programs_in_education(self) -> None:
        """Test education pages search for the academic program concept."""
        assert [q.text for q in wikipedia_queries("Academic Programs", "Higher Education")] == [
            "Academic program education"
        ]
        assert wikidata_queries("Academic Programs", "education")[0] == "academic program"
        assert wikidata_queries("Academic Programs", "cooking") == ["Academic Programs"]

    def test_plain_entity_unchanged(self) -> None:
        """Test ordinary entities are searched verbatim."""
        assert [q.text for q in wikipedia_queries("Python")] == ["Python"]


class TestTitleMatchScore:
    """Tests for encyclopedia title scoring."""

    def test_exact_match(self) -> None:
        """Test an exact match scores 100 plus the capitalization bonus."""
        assert title_match_score("python", "Python") == 105

    def test_airport_names(self) -> None:
        """Test airport names compare without their qualifiers."""
        assert title_match_score("o'hare airport", "O'Hare International Airport") == 95

    def test_geographic_qualifier_penalty(self) -> None:
        """Test a place qualifier the entity lacks is penalized."""
        assert title_match_score("plumbing", "Plumbing in Texas") == 50

    def test_word_overlap(self) -> None:
        """Test strong word overlap scores on the 50-point scale."""
        assert title_match_score("search engine marketing", "Marketing search engine") == 55

    def test_never_negative(self) -> None:
        """Test penalties never push the score below zero."""
        assert title_match_score("ai", "Artificial intelligence in video games") == 0

    def test_penalties_and_floors(self) -> None:
        """Test disambiguation penalties and parenthetical floors."""
        assert title_penalties("Mercury (disambiguation)") == 50
        assert title_penalties("Stub article") == 30
        assert title_min_score("Mercury (planet)") == 85
        assert title_min_score("Mercury") == 65

    def test_extract_support(self) -> None:
        """Test lead-extract verification."""
        assert extract_supports_entity("Python is a programming language.", "python")
        assert extract_supports_entity(
            "The Chicago airport handles flights.", "chicago o'hare airport"
        )
        assert not extract_supports_entity("Unrelated text", "quantum computing")


class TestLabelMatchScore:
    """Tests for Wikidata and Knowledge Graph label scoring."""

    def test_containment_tiers(self) -> None:
        """Test exact, containing and contained labels."""
        assert label_match_score("apple", "apple") == 100
        assert label_match_score("apple", "apple inc.") == 80
        assert label_match_score("apple inc", "apple") == 70
        assert label_match_score("red car", "blue boat") == 0

    def test_description_bonus(self) -> None:
        """Test a description naming the entity adds up to 20."""
        assert label_match_score("red car", "blue boat", "a red toy car") == 20


class TestSelectBest:
    """Tests for candidate selection."""

    def test_highest_above_floor(self) -> None:
        """Test the best eligible candidate is returned."""
        candidates = [
            MatchCandidate("A", "a", 70),
            MatchCandidate("B", "b", 90),
            MatchCandidate("C", "c", 92, min_score=95),
        ]
        assert select_best(candidates, 65).title == "B"

    def test_ties_keep_earlier(self) -> None:
        """Test equal scores keep the first candidate."""
        candidates = [MatchCandidate("X", "x", 80), MatchCandidate("Y", "y", 80)]
        assert select_best(candidates, 65).title == "X"

    def test_nothing_above_floor(self) -> None:
        """Test None when every candidate is below the floor."""
        assert select_best([MatchCandidate("A", "a", 40)], 65) is None

    def test_lowering_floor_never_displaces_match(self) -> None:
        """Test a lower floor only admits weaker candidates."""
        candidates = [
            MatchCandidate("Low", "l", 55),
            MatchCandidate("High", "h", 90),
            MatchCandidate("Mid", "m", 70),
        ]
        for floor in (85, 65, 50, 0):
            assert select_best(candidates, floor).title == "High"


class TestConfidence:
    """Tests for confidence scoring."""

    def test_positional_relevance(self) -> None:
        """Test the first candidate earns the full 70."""
        assert positional_relevance(0, 10) == 70
        assert positional_relevance(9, 10) == 7
        assert positional_relevance(0, 0) == 0

    def test_round_half_up(self) -> None:
        """Test halves round up rather than to even."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(59.49) == 59

    def test_clamped_to_100(self) -> None:
        """Test a fully sourced entity is clamped to 100."""
        entity = EnrichedEntity(
            name="Guido van Rossum",
            wikipedia_url="https://en.wikipedia.org/wiki/Guido_van_Rossum",
            wikidata_url="https://www.wikidata.org/wiki/Q30896",
            google_kg_url=KG_MID_URL,
            productontology_url="http://www.productontology.org/id/Guido",
            type="person",
        )
        assert calculate_confidence(entity, 70) == 100

    def test_search_fallback_earns_nothing(self) -> None:
        """Test a plain KG search link adds no points."""
        entity = EnrichedEntity(
            name="Python",
            wikipedia_url="https://en.wikipedia.org/wiki/Python",
            google_kg_url=KG_SEARCH_URL,
        )
        assert calculate_confidence(entity, 35) == 50

    def test_agreement_and_type_bonus(self) -> None:
        """Test two-source agreement and the fallback type bonus."""
        entity = EnrichedEntity(
            name="Intro to Python",
            wikipedia_url="https://en.wikipedia.org/wiki/Python",
            wikidata_url="https://www.wikidata.org/wiki/Q28865",
            type="Course",
        )
        assert calculate_confidence(entity, 21.5) == 60


class TestEnrichedEntity:
    """Tests for the enriched entity model."""

    def test_source_count_ignores_search_fallback(self) -> None:
        """Test only a machine-id KG link counts as a source."""
        assert EnrichedEntity(name="x", google_kg_url=KG_SEARCH_URL).source_count == 0
        assert EnrichedEntity(name="x", google_kg_url=KG_MID_URL).source_count == 1

    def test_confidence_is_clamped(self) -> None:
        """Test derived copies keep the score in 0..100."""
        entity = EnrichedEntity(name="x")
        assert entity.with_confidence(150).confidence_score == 100
        assert entity.with_confidence(-5).confidence_score == 0
        assert entity.confidence_score == 0

    def test_irrelevant_only_serialized_when_set(self) -> None:
        """Test the irrelevant key appears once the flag is decided."""
        entity = EnrichedEntity(name="x")
        assert "irrelevant" not in entity.to_dict()
        assert entity.with_irrelevance(True).to_dict()["irrelevant"] is True

    def test_from_dict(self) -> None:
        """Test deserialization clamps the stored score."""
        entity = EnrichedEntity.from_dict({"name": "x", "confidence_score": 120})
        assert entity.confidence_score == 100
        assert entity.wikipedia_url is None
