"""Data models for entity enrichment."""

from dataclasses import dataclass, replace
from typing import Any

KG_MACHINE_ID_MARKER = "kgmid="


@dataclass(frozen=True)
class EnrichedEntity:
    """
    An entity candidate resolved against external knowledge sources.

    Instances are immutable; later stages derive copies with an updated
    confidence score or irrelevance flag.
    """

    name: str
    wikipedia_url: str | None = None
    wikidata_url: str | None = None
    google_kg_url: str | None = None
    productontology_url: str | None = None
    confidence_score: int = 0
    type: str | None = None
    irrelevant: bool | None = None

    @property
    def has_kg_machine_id(self) -> bool:
        """True when the KG URL carries a machine id rather than a search fallback."""
        return bool(self.google_kg_url) and KG_MACHINE_ID_MARKER in self.google_kg_url

    @property
    def source_count(self) -> int:
        """Number of external sources found; a KG search fallback does not count."""
        return sum(
            [
                bool(self.wikipedia_url),
                bool(self.wikidata_url),
                self.has_kg_machine_id,
                bool(self.productontology_url),
            ]
        )

    def with_confidence(self, score: int) -> "EnrichedEntity":
        return replace(self, confidence_score=max(0, min(100, int(score))))

    def with_irrelevance(self, irrelevant: bool) -> "EnrichedEntity":
        return replace(self, irrelevant=irrelevant)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "wikipedia_url": self.wikipedia_url,
            "wikidata_url": self.wikidata_url,
            "google_kg_url": self.google_kg_url,
            "productontology_url": self.productontology_url,
            "confidence_score": self.confidence_score,
            "type": self.type,
        }
        if self.irrelevant is not None:
            data["irrelevant"] = self.irrelevant
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnrichedEntity":
        return cls(
            name=data["name"],
            wikipedia_url=data.get("wikipedia_url"),
            wikidata_url=data.get("wikidata_url"),
            google_kg_url=data.get("google_kg_url"),
            productontology_url=data.get("productontology_url"),
            confidence_score=max(0, min(100, int(data.get("confidence_score", 0)))),
            type=data.get("type"),
            irrelevant=data.get("irrelevant"),
        )


@dataclass
class MatchCandidate:
    """A scored search hit from one external source."""

    title: str
    url: str
    score: float
    min_score: float = 0
