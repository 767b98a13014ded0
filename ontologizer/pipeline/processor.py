"""
Analysis pipeline.

Fetches or formats the page, generates entity candidates, enriches them,
then scores salience, synthesizes JSON-LD, produces recommendations and
optionally runs the fan-out analysis. URL results are cached whole.
"""

import time
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from api.config import Settings
from api.exceptions import FetchError, InputError
from ontologizer.cache.store import KeyValueStore, MemoryStore, RedisStore, ResultCache
from ontologizer.candidates.generator import CandidateGenerator
from ontologizer.candidates.heuristics import MainTopicStrategy
from ontologizer.crawler.fetcher import PageFetcher
from ontologizer.enrichment.cache import EntityCache
from ontologizer.enrichment.clients import (
    GoogleKGClient,
    ProductOntologyClient,
    WikidataClient,
    WikipediaClient,
)
from ontologizer.enrichment.engine import EnrichmentEngine
from ontologizer.extraction.content_format import FormattedContent, format_pasted_content
from ontologizer.extraction.text import TextParts, extract_text_parts
from ontologizer.fanout.analyzer import FanoutAnalyzer
from ontologizer.llm.capability import LLMCapability
from ontologizer.llm.models import ProviderType
from ontologizer.llm.providers import ProviderConfig, get_provider
from ontologizer.pipeline.context import AnalysisContext
from ontologizer.pipeline.result import PageAnalysisResult
from ontologizer.recommendations.generator import RecommendationGenerator
from ontologizer.salience.scorer import (
    annotate_irrelevance,
    salience_tips,
    topical_salience,
    weakly_mentioned,
)
from ontologizer.schema.synthesizer import SchemaSynthesizer

logger = structlog.get_logger(__name__)

EMPTY_INPUT_MESSAGE = "Please provide a URL or paste content."
INVALID_URL_MESSAGE = "Invalid URL format provided"


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def merge_structured_text(parts: TextParts, structured: TextParts | None) -> TextParts:
    """Prefer the structure recovered from markdown or plain text over re-extraction."""
    if structured is None:
        return parts
    return TextParts(
        title=structured.title,
        meta=structured.meta or parts.meta,
        headings=list(structured.headings),
        body=structured.body,
    )


class OntologizerProcessor:
    """Runs full and fan-out-only analyses for URLs and pasted content."""

    def __init__(
        self,
        fetcher: PageFetcher,
        llm: LLMCapability,
        engine: EnrichmentEngine,
        page_cache: ResultCache,
        entity_cache: EntityCache | None = None,
        budget_seconds: float = 180.0,
    ):
        self.fetcher = fetcher
        self.llm = llm
        self.engine = engine
        self.page_cache = page_cache
        self.entity_cache = entity_cache
        self.budget_seconds = budget_seconds

        self.candidates = CandidateGenerator(llm)
        self.schema = SchemaSynthesizer()
        self.recommendations = RecommendationGenerator(llm)
        self.fanout = FanoutAnalyzer(llm)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: KeyValueStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OntologizerProcessor":
        """
        Wire a processor from application settings.

        Args:
            settings: Application settings
            store: Cache backend; defaults to the configured backend
            transport: Optional httpx transport shared by every outbound client

        Returns:
            A ready processor
        """
        if store is None:
            if settings.cache_backend == "memory":
                store = MemoryStore()
            else:
                store = RedisStore(url=str(settings.redis_url))

        entity_provider = None
        if settings.openai_api_key:
            entity_provider = get_provider(
                ProviderType.OPENAI,
                ProviderConfig(
                    api_key=settings.openai_api_key,
                    timeout_seconds=settings.llm_timeout_seconds,
                    transport=transport,
                ),
            )
        fanout_provider = None
        if settings.gemini_api_key:
            fanout_provider = get_provider(
                ProviderType.GEMINI,
                ProviderConfig(api_key=settings.gemini_api_key, timeout_seconds=60.0, transport=transport),
            )
        llm = LLMCapability(
            entity_provider=entity_provider,
            fanout_provider=fanout_provider,
            entity_model=settings.openai_model,
            fanout_model=settings.gemini_model,
        )

        entity_cache = EntityCache(store, ttl_seconds=settings.entity_cache_ttl_seconds)
        google_kg = (
            GoogleKGClient(settings.google_kg_api_key, transport=transport)
            if settings.google_kg_api_key
            else None
        )
        engine = EnrichmentEngine.from_clients(
            WikipediaClient(transport=transport),
            WikidataClient(transport=transport),
            google_kg,
            ProductOntologyClient(transport=transport),
            cache=entity_cache,
            max_entities=settings.effective_max_entities,
            rate_limit_delay=settings.rate_limit_delay_seconds,
        )

        fetcher = PageFetcher(
            user_agent=settings.fetch_user_agent,
            timeout=settings.fetch_timeout_seconds,
            max_redirects=settings.fetch_max_redirects,
            max_bytes=settings.fetch_max_bytes,
            transport=transport,
        )

        return cls(
            fetcher=fetcher,
            llm=llm,
            engine=engine,
            page_cache=ResultCache(store, ttl_seconds=settings.cache_duration_seconds),
            entity_cache=entity_cache,
            budget_seconds=settings.request_budget_seconds,
        )

    def _new_context(self) -> AnalysisContext:
        return AnalysisContext(budget_seconds=self.budget_seconds)

    async def _fetch_html(self, url: str) -> str:
        if not is_valid_url(url):
            raise InputError(INVALID_URL_MESSAGE, field="url")

        result = await self.fetcher.fetch(url)
        if not result.success or not result.html:
            raise FetchError(url, reason=result.error, status_code=result.status_code or None)
        return result.html

    async def process_url(
        self,
        url: str,
        strategy: MainTopicStrategy | str = MainTopicStrategy.STRICT,
        run_fanout: bool = False,
    ) -> dict[str, Any]:
        """
        Analyze a page by URL, serving a cached result when one is live.

        Raises:
            InputError: If the URL is malformed
            FetchError: If the page cannot be retrieved
        """
        if not is_valid_url(url):
            raise InputError(INVALID_URL_MESSAGE, field="url")

        cached = await self.page_cache.get(url)
        if cached is not None:
            # Usage reflects this request, which made no LLM calls
            cached["cached"] = True
            cached["openai_token_usage"] = 0
            cached["openai_cost_usd"] = 0.0
            return cached

        ctx = self._new_context()
        html = await self._fetch_html(url)
        parts = extract_text_parts(html)

        result = await self._analyze(html, parts, url, strategy, run_fanout, ctx)
        data = result.to_dict()
        await self.page_cache.set(url, data)
        return data

    async def process_pasted_content(
        self,
        content: str,
        strategy: MainTopicStrategy | str = MainTopicStrategy.STRICT,
        run_fanout: bool = False,
    ) -> dict[str, Any]:
        """Analyze pasted HTML, markdown or plain text. Results are not cached."""
        if not content or not content.strip():
            raise InputError(EMPTY_INPUT_MESSAGE, field="paste_content")

        ctx = self._new_context()
        formatted: FormattedContent = format_pasted_content(content)
        parts = merge_structured_text(extract_text_parts(formatted.html), formatted.structured_text)

        result = await self._analyze(formatted.html, parts, "", strategy, run_fanout, ctx)
        result.pasted_content = True
        result.content_type = formatted.type.value
        return result.to_dict()

    async def _analyze(
        self,
        html: str,
        parts: TextParts,
        url: str,
        strategy: MainTopicStrategy | str,
        run_fanout: bool,
        ctx: AnalysisContext,
    ) -> PageAnalysisResult:
        log = logger.bind(url=url or None)

        candidate_set = await self.candidates.generate(parts, ctx, url=url, strategy=strategy)
        ctx.main_topic = candidate_set.primary_topic
        log.info(
            "candidates_ready",
            source=candidate_set.source.value,
            main_topic=ctx.main_topic,
            count=len(candidate_set.candidates),
            elapsed=round(ctx.elapsed(), 2),
        )

        entities = await self.engine.enrich(candidate_set.candidates, ctx)
        log.info("enrichment_ready", count=len(entities), elapsed=round(ctx.elapsed(), 2))

        json_ld = self.schema.synthesize(entities, url, html)
        recommendations = await self.recommendations.recommend(parts, entities, json_ld, ctx)

        weak = weakly_mentioned(entities, parts)
        fanout_analysis = None
        if run_fanout and self.llm.fanout_available:
            fanout_analysis = await self.fanout.analyze(html, url)

        result = PageAnalysisResult(
            url=url,
            entities=annotate_irrelevance(entities, ctx.main_topic),
            json_ld=json_ld,
            recommendations=recommendations,
            topical_salience=topical_salience(entities),
            primary_topic=ctx.main_topic,
            salience_tips=salience_tips(ctx.main_topic, weak, entities),
            irrelevant_entities=weak,
            page_title=parts.title,
            openai_token_usage=ctx.token_usage,
            openai_cost_usd=ctx.cost_usd,
            fanout_analysis=fanout_analysis,
            processing_time=ctx.elapsed(),
        )

        log.info(
            "analysis_complete",
            primary_topic=result.primary_topic,
            entities=len(result.entities),
            enriched=result.enriched_count,
            topical_salience=result.topical_salience,
            processing_time=round(result.processing_time, 2),
        )
        return result

    async def process_fanout_only(self, content: str) -> dict[str, Any]:
        """Fan-out analysis of pasted content without entity processing."""
        if not content or not content.strip():
            raise InputError(EMPTY_INPUT_MESSAGE, field="paste_content")
        started = time.monotonic()
        formatted = format_pasted_content(content)
        fanout_analysis = await self.fanout.analyze(formatted.html, "")
        return {
            "fanout_only": True,
            "fanout_analysis": fanout_analysis,
            "processing_time": round(time.monotonic() - started, 3),
            "timestamp": int(time.time()),
        }

    async def process_fanout_only_url(self, url: str) -> dict[str, Any]:
        """Fan-out analysis of a fetched page without entity processing."""
        started = time.monotonic()
        html = await self._fetch_html(url)
        fanout_analysis = await self.fanout.analyze(html, url)
        return {
            "url": url,
            "fanout_only": True,
            "fanout_analysis": fanout_analysis,
            "processing_time": round(time.monotonic() - started, 3),
            "timestamp": int(time.time()),
        }

    # Cache administration

    async def clear_url_cache(self, url: str) -> bool:
        return await self.page_cache.invalidate(url)

    async def list_cached_results(self) -> list[dict[str, Any]]:
        return await self.page_cache.list_entries()

    async def delete_cached_result(self, cache_key: str) -> bool:
        return await self.page_cache.delete_key(cache_key)

    async def clear_all_caches(self) -> int:
        """Drop every page result and cached entity."""
        cleared = await self.page_cache.clear()
        if self.entity_cache is not None:
            cleared += await self.entity_cache.clear()
        return cleared

    async def entity_cache_stats(self) -> dict[str, Any]:
        if self.entity_cache is None:
            return {"cached_entities": 0, "cache_size_bytes": 0}
        return await self.entity_cache.stats()

    async def clear_entity_cache(self) -> int:
        if self.entity_cache is None:
            return 0
        return await self.entity_cache.clear()
