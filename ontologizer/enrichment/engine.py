"""
Entity enrichment engine.

Walks the ranked candidate list in order, pre-filters cheap rejects,
reuses cached entities, and resolves the rest against Wikipedia,
Wikidata, the Google Knowledge Graph and ProductOntology. A circuit
breaker and the request's time budget bound how much work one analysis
can trigger; whatever was enriched before either stops the loop is kept.
"""

import asyncio
from dataclasses import dataclass

import structlog

from ontologizer.enrichment.cache import EntityCache
from ontologizer.enrichment.clients import (
    GoogleKGClient,
    ProductOntologyClient,
    WikidataClient,
    WikipediaClient,
)
from ontologizer.enrichment.entity_types import EntityTypeDetector
from ontologizer.enrichment.models import EnrichedEntity
from ontologizer.enrichment.rules import PREFILTER_RULES, PrefilterRule, prefilter_reason
from ontologizer.enrichment.scoring import (
    DEFAULT_WEIGHTS,
    ConfidenceWeights,
    calculate_confidence,
    positional_relevance,
)
from ontologizer.enrichment.sources import (
    GoogleKGResolver,
    ProductOntologyResolver,
    WikidataResolver,
    WikipediaResolver,
)
from ontologizer.pipeline.context import AnalysisContext

logger = structlog.get_logger(__name__)

# Hard ceiling on candidates considered per analysis
MAX_CANDIDATES = 20


@dataclass(frozen=True)
class CircuitBreaker:
    """Caps enrichments per analysis; cache-heavy runs are cheap and get more room."""

    max_successful: int = 12
    max_with_cache: int = 18
    cache_hit_threshold: int = 5

    def cap(self, cache_hits: int) -> int:
        if cache_hits >= self.cache_hit_threshold:
            return self.max_with_cache
        return self.max_successful

    def tripped(self, successful: int, cache_hits: int) -> bool:
        return successful >= self.cap(cache_hits)


class EnrichmentEngine:
    def __init__(
        self,
        wikipedia: WikipediaResolver,
        wikidata: WikidataResolver,
        google_kg: GoogleKGResolver,
        productontology: ProductOntologyResolver,
        types: EntityTypeDetector,
        cache: EntityCache | None = None,
        max_entities: int = MAX_CANDIDATES,
        rate_limit_delay: float = 0.5,
        weights: ConfidenceWeights = DEFAULT_WEIGHTS,
        breaker: CircuitBreaker = CircuitBreaker(),
        prefilter_rules: tuple[PrefilterRule, ...] = PREFILTER_RULES,
    ):
        self.wikipedia = wikipedia
        self.wikidata = wikidata
        self.google_kg = google_kg
        self.productontology = productontology
        self.types = types
        self.cache = cache
        self.max_entities = max(0, min(MAX_CANDIDATES, max_entities))
        self.rate_limit_delay = rate_limit_delay
        self.weights = weights
        self.breaker = breaker
        self.prefilter_rules = prefilter_rules

    @classmethod
    def from_clients(
        cls,
        wikipedia: WikipediaClient,
        wikidata: WikidataClient,
        google_kg: GoogleKGClient | None,
        productontology: ProductOntologyClient,
        **kwargs,
    ) -> "EnrichmentEngine":
        """Wire resolvers and type detection over a set of API clients."""
        return cls(
            wikipedia=WikipediaResolver(wikipedia),
            wikidata=WikidataResolver(wikidata, wikipedia),
            google_kg=GoogleKGResolver(google_kg),
            productontology=ProductOntologyResolver(productontology),
            types=EntityTypeDetector(wikidata),
            **kwargs,
        )

    async def enrich(self, candidates: list[str], ctx: AnalysisContext) -> list[EnrichedEntity]:
        """
        Enrich candidates in ranked order.

        Args:
            candidates: Entity strings, most salient first
            ctx: Analysis context carrying the main topic, deadline and counters

        Returns:
            Enriched entities sorted by confidence, highest first
        """
        batch = candidates[: self.max_entities]
        total = len(batch)
        stats = ctx.enrichment
        enriched: list[EnrichedEntity] = []

        for index, name in enumerate(batch):
            if ctx.budget_exceeded():
                stats.stopped_by_budget = True
                logger.warning("enrichment_budget_exhausted", processed=stats.processed)
                break

            stats.processed += 1
            reason = prefilter_reason(name, self.prefilter_rules)
            if reason is not None:
                stats.filtered += 1
                logger.debug("entity_filtered", entity=name, reason=reason)
                continue

            relevance = positional_relevance(index, total)
            entity = await self._from_cache(name, relevance)
            looked_up = entity is None

            if entity is None:
                try:
                    entity = await asyncio.wait_for(
                        self._resolve(name, relevance, ctx.main_topic),
                        timeout=ctx.time_remaining(),
                    )
                except TimeoutError:
                    stats.stopped_by_budget = True
                    logger.warning("enrichment_budget_exhausted", entity=name, processed=stats.processed)
                    break
                if self.cache is not None:
                    await self.cache.put(entity)
            else:
                stats.cache_hits += 1

            enriched.append(entity)
            stats.successful += 1

            if self.breaker.tripped(stats.successful, stats.cache_hits):
                stats.stopped_by_breaker = True
                logger.info(
                    "circuit_breaker_tripped",
                    successful=stats.successful,
                    cache_hits=stats.cache_hits,
                )
                break

            if looked_up and self.rate_limit_delay > 0 and index < total - 1:
                await asyncio.sleep(self.rate_limit_delay)

        enriched.sort(key=lambda e: e.confidence_score, reverse=True)

        logger.info("enrichment_complete", **stats.to_dict())
        return enriched

    async def _from_cache(self, name: str, relevance: float) -> EnrichedEntity | None:
        if self.cache is None:
            return None
        cached = await self.cache.get(name)
        if cached is None:
            return None
        # Only the positional part of the score depends on this page
        return cached.with_confidence(calculate_confidence(cached, relevance, self.weights))

    async def _resolve(self, name: str, relevance: float, main_topic: str) -> EnrichedEntity:
        async def wikipedia_chain() -> tuple[str | None, str | None]:
            match = await self.wikipedia.resolve(name, main_topic)
            wikipedia_url = match.url if match else None
            wikidata_url = await self.wikidata.resolve(name, wikipedia_url, main_topic)
            return wikipedia_url, wikidata_url

        (wikipedia_url, wikidata_url), google_kg_url, productontology_url = await asyncio.gather(
            wikipedia_chain(),
            self.google_kg.resolve(name),
            self.productontology.resolve(name),
        )

        entity = EnrichedEntity(
            name=name,
            wikipedia_url=wikipedia_url,
            wikidata_url=wikidata_url,
            google_kg_url=google_kg_url,
            productontology_url=productontology_url,
            type=await self.types.detect(name, wikidata_url),
        )
        entity = entity.with_confidence(calculate_confidence(entity, relevance, self.weights))

        logger.debug(
            "entity_enriched",
            entity=name,
            sources=entity.source_count,
            confidence=entity.confidence_score,
            type=entity.type,
        )
        return entity
