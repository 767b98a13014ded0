"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment before any app code runs
os.environ["ENV"] = "test"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["OPENAI_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_KG_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""
os.environ["RATE_LIMIT_DELAY_SECONDS"] = "0"

from ontologizer.cache.store import MemoryStore, ResultCache  # noqa: E402
from ontologizer.crawler.fetcher import PageFetcher  # noqa: E402
from ontologizer.enrichment.cache import EntityCache  # noqa: E402
from ontologizer.enrichment.clients import (  # noqa: E402
    ProductOntologyClient,
    WikidataClient,
    WikipediaClient,
)
from ontologizer.enrichment.engine import EnrichmentEngine  # noqa: E402
from ontologizer.llm.capability import LLMCapability  # noqa: E402
from ontologizer.llm.providers import StubProvider  # noqa: E402
from ontologizer.pipeline.context import AnalysisContext  # noqa: E402
from ontologizer.pipeline.processor import OntologizerProcessor  # noqa: E402
from tests.fixtures.web import FakeWeb  # noqa: E402


@pytest.fixture
def web() -> FakeWeb:
    """Canned pages and knowledge-source replies."""
    return FakeWeb()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def ctx() -> AnalysisContext:
    return AnalysisContext(main_topic="")


@pytest.fixture
def entity_stub() -> StubProvider:
    """Stub for the entity/recommendation model; replies "{}" unless told otherwise."""
    return StubProvider()


@pytest.fixture
def fanout_stub() -> StubProvider:
    return StubProvider()


@pytest.fixture
def engine(web: FakeWeb, store: MemoryStore) -> EnrichmentEngine:
    return EnrichmentEngine.from_clients(
        WikipediaClient(transport=web.transport),
        WikidataClient(transport=web.transport),
        None,
        ProductOntologyClient(transport=web.transport),
        cache=EntityCache(store),
        rate_limit_delay=0,
    )


def build_processor(
    web: FakeWeb,
    store: MemoryStore,
    entity_provider: StubProvider | None = None,
    fanout_provider: StubProvider | None = None,
) -> OntologizerProcessor:
    """Processor wired to the fake web with optional stub models."""
    entity_cache = EntityCache(store)
    engine = EnrichmentEngine.from_clients(
        WikipediaClient(transport=web.transport),
        WikidataClient(transport=web.transport),
        None,
        ProductOntologyClient(transport=web.transport),
        cache=entity_cache,
        rate_limit_delay=0,
    )
    return OntologizerProcessor(
        fetcher=PageFetcher(user_agent="test-agent", transport=web.transport),
        llm=LLMCapability(entity_provider=entity_provider, fanout_provider=fanout_provider),
        engine=engine,
        page_cache=ResultCache(store),
        entity_cache=entity_cache,
    )


@pytest.fixture
def processor(web: FakeWeb, store: MemoryStore) -> OntologizerProcessor:
    """Processor with no models configured (heuristic paths only)."""
    return build_processor(web, store)


@pytest.fixture
async def client(processor: OntologizerProcessor) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client backed by the fake-web processor."""
    from api.deps import get_processor
    from api.main import app

    app.dependency_overrides[get_processor] = lambda: processor
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
