"""HTTP clients for the external knowledge sources.

The clients only speak the wire protocol: they raise ``httpx.HTTPError``
on transport failures and non-2xx statuses and ``ValueError`` on bodies
that are not the expected JSON. Scoring and failure handling live in the
resolvers built on top of them.
"""

import re
from typing import Any

import httpx

DEFAULT_API_USER_AGENT = "Ontologizer/0.1 (entity enrichment)"

_TAG_RE = re.compile(r"<[^>]+>")


class JsonApiClient:
    """Base for read-only JSON APIs queried with short per-call timeouts."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = DEFAULT_API_USER_AGENT,
    ):
        self._transport = transport
        self.user_agent = user_agent

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            transport=self._transport,
            headers={"User-Agent": self.user_agent},
            follow_redirects=True,
        )

    async def _get_json(self, url: str, params: dict[str, Any], timeout: float) -> Any:
        async with self._client(timeout) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()

    async def _get_object(self, url: str, params: dict[str, Any], timeout: float) -> dict:
        """Like ``_get_json`` but the body must be a JSON object."""
        data = await self._get_json(url, params, timeout)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return data


class WikipediaClient(JsonApiClient):
    """English Wikipedia action API."""

    API_URL = "https://en.wikipedia.org/w/api.php"
    SEARCH_TIMEOUT = 8.0
    PAGE_TIMEOUT = 6.0

    async def opensearch(self, query: str, limit: int = 5) -> list[tuple[str, str]]:
        """Return (title, url) pairs for a fuzzy title search."""
        data = await self._get_json(
            self.API_URL,
            {
                "action": "opensearch",
                "search": query,
                "limit": limit,
                "namespace": 0,
                "format": "json",
            },
            self.SEARCH_TIMEOUT,
        )
        if not isinstance(data, list) or len(data) < 4:
            raise ValueError("Unexpected opensearch response shape")
        titles, urls = data[1], data[3]
        if not isinstance(titles, list) or not isinstance(urls, list):
            raise ValueError("Unexpected opensearch response shape")
        return [
            (title, url)
            for title, url in zip(titles, urls, strict=False)
            if isinstance(title, str) and isinstance(url, str)
        ]

    async def _pages(self, params: dict[str, Any]) -> list[dict]:
        data = await self._get_object(
            self.API_URL,
            {"action": "query", "format": "json", **params},
            self.PAGE_TIMEOUT,
        )
        query = data.get("query")
        pages = query.get("pages") if isinstance(query, dict) else None
        if not isinstance(pages, dict):
            return []
        return [page for page in pages.values() if isinstance(page, dict)]

    async def lead_extract(self, title: str) -> str | None:
        """Plain-text introduction of an article."""
        pages = await self._pages(
            {"prop": "extracts", "exintro": 1, "titles": title, "exlimit": 1}
        )
        for page in pages:
            if isinstance(page.get("extract"), str):
                return _TAG_RE.sub("", page["extract"])
        return None

    async def wikibase_item(self, title: str) -> str | None:
        """Wikidata Q-id linked from an article."""
        pages = await self._pages({"prop": "pageprops", "titles": title})
        for page in pages:
            props = page.get("pageprops")
            item = props.get("wikibase_item") if isinstance(props, dict) else None
            if isinstance(item, str) and item:
                return item
        return None


class WikidataClient(JsonApiClient):
    """Wikidata action API."""

    API_URL = "https://www.wikidata.org/w/api.php"
    ENTITY_URL = "https://www.wikidata.org/wiki/"
    SEARCH_TIMEOUT = 8.0
    LABEL_TIMEOUT = 6.0
    CLAIMS_TIMEOUT = 10.0

    async def search_entities(self, query: str, limit: int = 5) -> list[dict]:
        """wbsearchentities hits with id, label and description."""
        data = await self._get_object(
            self.API_URL,
            {
                "action": "wbsearchentities",
                "search": query,
                "language": "en",
                "limit": limit,
                "format": "json",
            },
            self.SEARCH_TIMEOUT,
        )
        hits = data.get("search")
        if not isinstance(hits, list):
            return []
        return [hit for hit in hits if isinstance(hit, dict)]

    async def english_label(self, qid: str) -> str | None:
        data = await self._get_object(
            self.API_URL,
            {"action": "wbgetentities", "ids": qid, "languages": "en", "format": "json"},
            self.LABEL_TIMEOUT,
        )
        try:
            value = data["entities"][qid]["labels"]["en"]["value"]
        except (KeyError, TypeError):
            return None
        return value if isinstance(value, str) else None

    async def instance_of(self, qid: str) -> str | None:
        """First P31 (instance of) target id."""
        data = await self._get_object(
            self.API_URL,
            {"action": "wbgetclaims", "entity": qid, "property": "P31", "format": "json"},
            self.CLAIMS_TIMEOUT,
        )
        try:
            target = data["claims"]["P31"][0]["mainsnak"]["datavalue"]["value"]["id"]
        except (KeyError, IndexError, TypeError):
            return None
        return target if isinstance(target, str) else None

    @classmethod
    def entity_url(cls, qid: str) -> str:
        return cls.ENTITY_URL + qid

    @staticmethod
    def qid_from_url(url: str) -> str:
        return url.rstrip("/").rsplit("/", 1)[-1]


class GoogleKGClient(JsonApiClient):
    """Google Knowledge Graph Search API."""

    API_URL = "https://kgsearch.googleapis.com/v1/entities:search"
    TIMEOUT = 6.0

    def __init__(
        self,
        api_key: str,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = DEFAULT_API_USER_AGENT,
    ):
        super().__init__(transport=transport, user_agent=user_agent)
        self.api_key = api_key

    async def search(self, query: str, limit: int = 5) -> list[dict]:
        """Result objects (name, description, @id) for a query."""
        data = await self._get_object(
            self.API_URL,
            {"query": query, "key": self.api_key, "limit": limit, "types": "Thing"},
            self.TIMEOUT,
        )
        items = data.get("itemListElement")
        if not isinstance(items, list):
            return []
        return [
            item["result"]
            for item in items
            if isinstance(item, dict) and isinstance(item.get("result"), dict)
        ]


class ProductOntologyClient(JsonApiClient):
    """Existence checks against productontology.org class pages."""

    BASE_URL = "http://www.productontology.org"
    PATHS = ("/id/", "/doc/")
    TIMEOUT = 5.0

    async def exists(self, url: str) -> bool:
        async with self._client(self.TIMEOUT) as client:
            response = await client.head(url, follow_redirects=False)
            return response.status_code == 200
