"""Tests for topical salience, irrelevance and tips."""

from ontologizer.enrichment.models import EnrichedEntity
from ontologizer.extraction.text import TextParts
from ontologizer.salience.scorer import (
    annotate_irrelevance,
    identify_irrelevant,
    salience_tips,
    topical_salience,
    weakly_mentioned,
)

KG_MID_URL = "https://www.google.com/search?kgmid=/m/0abc"


def entity(name: str, confidence: int, **kwargs) -> EnrichedEntity:
    return EnrichedEntity(name=name, confidence_score=confidence, **kwargs)


class TestTopicalSalience:
    """Tests for the page-level salience score."""

    def test_empty(self) -> None:
        """Test no entities scores zero."""
        assert topical_salience([]) == 0

    def test_maximum(self) -> None:
        """Test perfect entities with machine ids score 100."""
        entities = [entity("A", 100, google_kg_url=KG_MID_URL), entity("B", 100, google_kg_url=KG_MID_URL)]
        assert topical_salience(entities) == 100

    def test_blend(self) -> None:
        """Test the weighted blend of average, high share and KG share."""
        entities = [entity("A", 90, google_kg_url=KG_MID_URL), entity("B", 50)]
        # 70 * 0.5 + 50 * 0.35 + 50 * 0.15
        assert topical_salience(entities) == 60

    def test_search_fallback_not_counted(self) -> None:
        """Test KG search links do not count toward the KG share."""
        entities = [entity("A", 100, google_kg_url="https://www.google.com/search?q=A")]
        assert topical_salience(entities) == 85


class TestIrrelevance:
    """Tests for off-topic entity detection."""

    def test_low_confidence_off_topic(self) -> None:
        """Test weak entities unrelated to the topic are flagged."""
        entities = [
            entity("Chicago", 30),
            entity("Pizza", 30),
            entity("O'Hare", 90),
            entity("Weather", 50),
        ]
        assert identify_irrelevant(entities, "Airport Limo Service") == ["Pizza"]

    def test_example_institutions(self) -> None:
        """Test universities cited in SEO articles are flagged."""
        entities = [
            entity("Harvard University", 60),
            entity("University Marketing", 60),
            entity("Stanford University", 85),
        ]
        assert identify_irrelevant(entities, "SEO Guide") == ["Harvard University"]

    def test_unknown_topic_flags_every_weak_entity(self) -> None:
        """Test topics without a pattern row flag all low-confidence entities."""
        assert identify_irrelevant([entity("Pizza", 10)], "Gardening") == ["Pizza"]

    def test_annotate(self) -> None:
        """Test every entity gets an explicit flag."""
        annotated = annotate_irrelevance([entity("Pizza", 30), entity("Limo", 30)], "limo")
        assert [(e.name, e.irrelevant) for e in annotated] == [("Pizza", True), ("Limo", False)]


class TestWeaklyMentioned:
    """Tests for under-mentioned entity detection."""

    def test_weak_mentions(self) -> None:
        """Test entities outside title and headings with at most one body mention."""
        parts = TextParts(
            title="Python Guide",
            headings=["Using Django"],
            body="Flask is small. Flask is fast. Pyramid appears once.",
        )
        entities = [entity(n, 50) for n in ("Python", "Django", "Flask", "Pyramid", "Bottle")]

        assert weakly_mentioned(entities, parts) == ["Pyramid", "Bottle"]


class TestSalienceTips:
    """Tests for improvement tips."""

    def test_with_irrelevant(self) -> None:
        """Test three tips naming the irrelevant entities."""
        tips = salience_tips("SEO", ["Pizza"], [])
        assert len(tips) == 3
        assert "('SEO')" in tips[0]
        assert "Pizza" in tips[1]

    def test_without_irrelevant(self) -> None:
        """Test two tips when nothing is off-topic."""
        assert len(salience_tips("SEO", [], [])) == 2

    def test_person_topic_context(self) -> None:
        """Test person topics point at supporting contextual entities."""
        entities = [
            entity("Julia Child", 90, type="person"),
            entity("Paris", 70, type="city"),
            entity("French cuisine", 70, type="cuisine"),
        ]
        tips = salience_tips("Julia Child", ["Paris"], entities)
        assert len(tips) == 3
        assert "Paris, French cuisine" in tips[1]
        assert tips[1].startswith("Strengthen")
