"""Entity candidate generator."""

from dataclasses import dataclass, field
from enum import StrEnum

import structlog

from ontologizer.candidates.heuristics import (
    MainTopicStrategy,
    choose_main_topic,
    expand_sub_phrases,
    extract_basic_candidates,
    inject_topic_entities,
    mine_ngrams,
    rank_candidates,
)
from ontologizer.candidates.synonyms import dedupe_key
from ontologizer.extraction.text import TextParts
from ontologizer.llm.capability import LLMCapability
from ontologizer.pipeline.context import AnalysisContext

logger = structlog.get_logger(__name__)


class CandidateSource(StrEnum):
    LLM = "llm"
    HEURISTIC = "heuristic"


@dataclass
class CandidateSet:
    """Ordered candidates plus the page's primary topic."""

    primary_topic: str
    candidates: list[str] = field(default_factory=list)
    source: CandidateSource = CandidateSource.HEURISTIC


def dedupe_by_canonical_key(candidates: list[str]) -> list[str]:
    """Keep the first candidate for each abbreviation/expansion pair and exact repeat."""
    seen: set[str] = set()
    out = []
    for candidate in candidates:
        key = dedupe_key(candidate)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(candidate)
    return out


class CandidateGenerator:
    """
    Produces ranked entity candidates for a page.

    The LLM path is tried first; when it is unavailable or fails, regex
    extraction ranked by on-page salience takes over. Post-processing
    (topic phrase injection, sub-phrase expansion, n-gram mining and
    synonym de-duplication) runs on either path.
    """

    def __init__(self, llm: LLMCapability):
        self.llm = llm

    async def generate(
        self,
        parts: TextParts,
        ctx: AnalysisContext,
        url: str = "",
        strategy: MainTopicStrategy | str = MainTopicStrategy.STRICT,
    ) -> CandidateSet:
        llm_topic = ""
        extraction = None
        if self.llm.entities_available:
            extraction = await self.llm.extract_entities(parts.combined(), ctx)

        if extraction is not None and extraction.entities:
            candidates = extraction.entities
            llm_topic = extraction.main_topic
            source = CandidateSource.LLM
        else:
            if self.llm.entities_available:
                logger.info("llm_extraction_fallback", reason="no usable entities")
            candidates = rank_candidates(extract_basic_candidates(parts.combined()), parts)
            source = CandidateSource.HEURISTIC

        main_topic = llm_topic or choose_main_topic(candidates, parts, strategy)

        processed = inject_topic_entities(candidates, parts, main_topic)
        processed = expand_sub_phrases(processed, parts)
        processed = mine_ngrams(processed, parts, url)
        processed = dedupe_by_canonical_key(processed)

        logger.info(
            "candidates_generated",
            source=source.value,
            main_topic=main_topic,
            initial=len(candidates),
            final=len(processed),
        )

        return CandidateSet(primary_topic=main_topic, candidates=processed, source=source)
