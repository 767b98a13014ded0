"""Per-source resolvers.

Each resolver turns an entity string into a URL on one knowledge source,
or None. Network failures are logged and treated as "not found" so one
flaky source never fails the whole entity.
"""

from urllib.parse import quote, quote_plus, unquote

import httpx
import structlog

from ontologizer.candidates.synonyms import entity_variants
from ontologizer.enrichment.clients import (
    GoogleKGClient,
    ProductOntologyClient,
    WikidataClient,
    WikipediaClient,
)
from ontologizer.enrichment.matching import (
    EXTRACT_CONFIRMED_BONUS,
    EXTRACT_REJECTED_PENALTY,
    GOOGLE_KG_MIN_SCORE,
    WIKIDATA_MIN_SCORE,
    WIKIDATA_TITLE_AGREEMENT_MIN,
    WIKIPEDIA_MIN_SCORE,
    WIKIPEDIA_VERIFY_ABOVE,
    extract_supports_entity,
    label_match_score,
    select_best,
    title_match_score,
    title_min_score,
    title_penalties,
)
from ontologizer.enrichment.models import MatchCandidate
from ontologizer.enrichment.rules import (
    is_irrelevant_title,
    is_title_mismatch,
    is_wikidata_mismatch,
    wikidata_queries,
    wikipedia_queries,
)

logger = structlog.get_logger(__name__)

GOOGLE_SEARCH_URL = "https://www.google.com/search"

LOOKUP_ERRORS = (httpx.HTTPError, ValueError)


def _text(hit: dict, key: str) -> str:
    """String field of an API hit; anything else reads as empty."""
    value = hit.get(key)
    return value if isinstance(value, str) else ""


def page_title_from_url(url: str) -> str:
    """Article title from the last segment of a Wikipedia URL, with spaces restored."""
    return unquote(url.rstrip("/").rsplit("/", 1)[-1]).replace("_", " ")


class WikipediaResolver:
    """Finds the encyclopedia article for an entity."""

    def __init__(self, client: WikipediaClient):
        self.client = client

    async def resolve(self, entity: str, main_topic: str = "") -> MatchCandidate | None:
        entity_lc = entity.strip().lower()
        queries = wikipedia_queries(entity, main_topic)

        # Rewritten queries are scored against every accepted surface form
        rewritten = [q.text for q in queries] != [entity]
        variants = tuple(dict.fromkeys([entity_lc, *entity_variants(entity)])) if rewritten else (entity_lc,)

        for query in queries:
            try:
                hits = await self.client.opensearch(query.text, limit=query.limit)
            except LOOKUP_ERRORS as e:
                logger.warning("wikipedia_lookup_failed", entity=entity, query=query.text, error=str(e))
                continue

            candidates = []
            for title, url in hits:
                candidate = await self._score_hit(entity_lc, variants, title, url)
                if candidate is not None:
                    candidates.append(candidate)

            best = select_best(candidates, WIKIPEDIA_MIN_SCORE)
            if best is not None:
                logger.debug("wikipedia_match_found", entity=entity, title=best.title, score=best.score)
                return best

        return None

    async def _score_hit(
        self, entity_lc: str, variants: tuple[str, ...], title: str, url: str
    ) -> MatchCandidate | None:
        title_lc = title.lower()
        if is_title_mismatch(entity_lc, title_lc):
            logger.debug("wikipedia_title_mismatch", entity=entity_lc, title=title)
            return None
        if is_irrelevant_title(entity_lc, title_lc):
            return None

        score = max(title_match_score(v, title) for v in variants)
        if score > WIKIPEDIA_VERIFY_ABOVE:
            if await self._verify(url, variants):
                score += EXTRACT_CONFIRMED_BONUS
            else:
                score -= EXTRACT_REJECTED_PENALTY
        score -= title_penalties(title)

        return MatchCandidate(title=title, url=url, score=score, min_score=title_min_score(title))

    async def _verify(self, url: str, variants: tuple[str, ...]) -> bool:
        try:
            extract = await self.client.lead_extract(page_title_from_url(url))
        except LOOKUP_ERRORS:
            return False
        if extract is None:
            return False
        return any(extract_supports_entity(extract, v) for v in variants)


class WikidataResolver:
    """Finds the Wikidata item, preferring the one linked from the article."""

    def __init__(self, client: WikidataClient, wikipedia: WikipediaClient):
        self.client = client
        self.wikipedia = wikipedia

    async def resolve(
        self, entity: str, wikipedia_url: str | None = None, main_topic: str = ""
    ) -> str | None:
        if wikipedia_url:
            url = await self.from_wikipedia(wikipedia_url)
            if url:
                return url
        return await self.direct(entity, main_topic)

    async def from_wikipedia(self, wikipedia_url: str) -> str | None:
        page_title = page_title_from_url(wikipedia_url)
        try:
            qid = await self.wikipedia.wikibase_item(page_title)
            if not qid:
                return None
            if "airport" in page_title.lower():
                return self.client.entity_url(qid)

            label = await self.client.english_label(qid)
        except LOOKUP_ERRORS as e:
            logger.warning("wikidata_lookup_failed", page=page_title, error=str(e))
            return None

        if label and label_match_score(page_title.lower(), label.lower()) >= WIKIDATA_TITLE_AGREEMENT_MIN:
            return self.client.entity_url(qid)

        logger.debug("wikidata_label_disagrees", page=page_title, qid=qid, label=label)
        return None

    async def direct(self, entity: str, main_topic: str = "") -> str | None:
        entity_lc = entity.strip().lower()

        for term in wikidata_queries(entity, main_topic):
            try:
                hits = await self.client.search_entities(term)
            except LOOKUP_ERRORS as e:
                logger.warning("wikidata_lookup_failed", entity=entity, query=term, error=str(e))
                continue

            candidates = []
            for hit in hits:
                label = _text(hit, "label")
                description = _text(hit, "description")
                qid = _text(hit, "id")
                if not qid or is_wikidata_mismatch(label.lower(), description):
                    continue
                candidates.append(
                    MatchCandidate(
                        title=label,
                        url=self.client.entity_url(qid),
                        score=label_match_score(entity_lc, label.lower(), description),
                    )
                )

            best = select_best(candidates, WIKIDATA_MIN_SCORE)
            if best is not None:
                return best.url

        return None


def google_search_url(entity: str) -> str:
    return f"{GOOGLE_SEARCH_URL}?q={quote_plus(entity)}"


class GoogleKGResolver:
    """
    Knowledge Graph machine-id lookup.

    Always yields a URL: a ``kgmid`` link when the API returns a confident
    match, otherwise a plain search link for the entity.
    """

    def __init__(self, client: GoogleKGClient | None):
        self.client = client

    async def resolve(self, entity: str) -> str:
        if self.client is None:
            return google_search_url(entity)

        entity_lc = entity.strip().lower()
        try:
            results = await self.client.search(entity)
        except LOOKUP_ERRORS as e:
            logger.warning("google_kg_lookup_failed", entity=entity, error=str(e))
            return google_search_url(entity)

        candidates = [
            MatchCandidate(
                title=_text(result, "name"),
                url=_text(result, "@id"),
                score=label_match_score(
                    entity_lc, _text(result, "name").lower(), _text(result, "description")
                ),
            )
            for result in results
        ]
        best = select_best(candidates, GOOGLE_KG_MIN_SCORE)
        if best is not None and best.url:
            mid = best.url.replace("kg:", "")
            return f"{GOOGLE_SEARCH_URL}?kgmid={mid}"

        return google_search_url(entity)


def productontology_slugs(entity: str) -> list[str]:
    """Candidate class slugs, most conventional first, without duplicates."""
    lowered = entity.strip().lower()
    slugs = [
        lowered.title().replace(" ", "_"),
        lowered.replace(" ", "-"),
        lowered.replace(" ", "_"),
        lowered[:1].upper() + lowered[1:],
        entity.strip().upper(),
    ]
    return list(dict.fromkeys(s for s in slugs if s))


class ProductOntologyResolver:
    """Checks productontology.org for a class page named after the entity."""

    def __init__(self, client: ProductOntologyClient):
        self.client = client

    async def resolve(self, entity: str) -> str | None:
        for path in self.client.PATHS:
            for slug in productontology_slugs(entity):
                url = f"{self.client.BASE_URL}{path}{quote(slug)}"
                try:
                    if await self.client.exists(url):
                        return url
                except httpx.HTTPError as e:
                    logger.debug("productontology_check_failed", url=url, error=str(e))
        return None
