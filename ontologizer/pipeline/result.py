"""Result model for one page analysis."""

import time
from dataclasses import dataclass, field
from typing import Any

from ontologizer.enrichment.models import EnrichedEntity


@dataclass
class PageAnalysisResult:
    """Everything one analysis produces, in the shape clients consume."""

    url: str
    entities: list[EnrichedEntity]
    json_ld: dict[str, Any]
    recommendations: list[dict[str, str]]
    topical_salience: int
    primary_topic: str
    salience_tips: list[str] = field(default_factory=list)
    irrelevant_entities: list[str] = field(default_factory=list)
    processing_time: float = 0.0
    page_title: str = ""
    openai_token_usage: int = 0
    openai_cost_usd: float = 0.0
    fanout_analysis: dict[str, Any] | None = None
    cached: bool = False
    timestamp: int = field(default_factory=lambda: int(time.time()))

    # Set for pasted content only
    pasted_content: bool = False
    content_type: str | None = None

    @property
    def main_topic_confidence(self) -> int:
        return self.entities[0].confidence_score if self.entities else 0

    @property
    def enriched_count(self) -> int:
        """Entities resolved against at least one external source."""
        return sum(1 for e in self.entities if e.source_count > 0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization and caching."""
        data: dict[str, Any] = {
            "url": self.url,
            "entities": [e.to_dict() for e in self.entities],
            "json_ld": self.json_ld,
            "recommendations": self.recommendations,
            "topical_salience": self.topical_salience,
            "primary_topic": self.primary_topic,
            "main_topic_confidence": self.main_topic_confidence,
            "salience_tips": self.salience_tips,
            "irrelevant_entities": self.irrelevant_entities,
            "processing_time": round(self.processing_time, 3),
            "entities_count": len(self.entities),
            "enriched_count": self.enriched_count,
            "cached": self.cached,
            "timestamp": self.timestamp,
            "page_title": self.page_title,
            "openai_token_usage": self.openai_token_usage,
            "openai_cost_usd": round(self.openai_cost_usd, 6),
            "fanout_analysis": self.fanout_analysis,
        }
        if self.pasted_content:
            data["pasted_content"] = True
            data["content_type"] = self.content_type
        return data
