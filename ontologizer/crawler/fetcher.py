"""HTTP page fetcher with a single relaxed-TLS retry."""

from dataclasses import dataclass
from datetime import UTC, datetime

import httpx
import structlog

logger = structlog.get_logger(__name__)

BROWSER_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
}


@dataclass
class FetchResult:
    """Result of fetching a URL."""

    url: str
    final_url: str  # After redirects
    status_code: int
    content_type: str | None
    html: str | None
    error: str | None
    fetch_time_ms: int
    fetched_at: datetime
    truncated: bool = False

    @property
    def success(self) -> bool:
        """Check if fetch was successful."""
        return self.status_code == 200 and self.html is not None


class PageFetcher:
    """Fetches a single page the way a desktop browser would."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 45.0,
        max_redirects: int = 10,
        max_bytes: int = 5_000_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.max_bytes = max_bytes
        self._transport = transport

    def _client(self, verify: bool) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            verify=verify,
            transport=self._transport,
            headers={"User-Agent": self.user_agent, **BROWSER_HEADERS},
        )

    async def _get(self, url: str, verify: bool) -> httpx.Response:
        async with self._client(verify) as client:
            return await client.get(url)

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a URL.

        A transport-level failure (TLS handshake, connect error, timeout)
        is retried exactly once with certificate verification disabled.
        Any status other than 200 is reported as a failed fetch.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult with response data or error
        """
        start_time = datetime.now(UTC)

        try:
            try:
                response = await self._get(url, verify=True)
            except httpx.RequestError as e:
                logger.warning("fetch_retry_without_tls_verify", url=url, error=str(e))
                response = await self._get(url, verify=False)
        except httpx.RequestError as e:
            logger.warning("fetch_failed", url=url, error=str(e))
            return FetchResult(
                url=url,
                final_url=url,
                status_code=0,
                content_type=None,
                html=None,
                error=str(e) or type(e).__name__,
                fetch_time_ms=self._elapsed_ms(start_time),
                fetched_at=start_time,
            )

        content_type = response.headers.get("content-type", "")

        if response.status_code != 200:
            logger.warning("fetch_bad_status", url=url, status_code=response.status_code)
            return FetchResult(
                url=url,
                final_url=str(response.url),
                status_code=response.status_code,
                content_type=content_type,
                html=None,
                error=f"HTTP {response.status_code}",
                fetch_time_ms=self._elapsed_ms(start_time),
                fetched_at=start_time,
            )

        body = response.content
        truncated = len(body) > self.max_bytes
        if truncated:
            logger.info("fetch_body_truncated", url=url, size=len(body), limit=self.max_bytes)
            body = body[: self.max_bytes]

        html = body.decode(response.encoding or "utf-8", errors="replace")

        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=content_type,
            html=html,
            error=None,
            fetch_time_ms=self._elapsed_ms(start_time),
            fetched_at=start_time,
            truncated=truncated,
        )

    @staticmethod
    def _elapsed_ms(start_time: datetime) -> int:
        return int((datetime.now(UTC) - start_time).total_seconds() * 1000)
