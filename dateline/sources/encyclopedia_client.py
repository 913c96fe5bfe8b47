"""Encyclopedia snapshot client: day digests, articles and identifier lookup.

Backed by the MediaWiki action API (plain-text extracts) and Wikidata
entity JSON, both over httpx:

- digest(day): the "<Month> <D>" date page, a year-independent list of
  notable occurrences, births and deaths for that calendar day
- article_text(title): plain text of one article
- resolve_title(external_id): Wikidata QID -> English Wikipedia title

All three are memoized in the shared ResultCache.
"""

import re
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import httpx

from dateline.config.logging import get_logger
from dateline.config.settings import settings
from dateline.data_management.result_cache import ResultCache
from dateline.data_management.schemas import CalendarDay
from dateline.llm.retry import RetryPolicy

USER_AGENT = "dateline/0.1 (event date verification)"

_QID_PATTERN = re.compile(r"^Q\d+$", re.IGNORECASE)


def article_title_from_url(url: str) -> Optional[str]:
    """
    Extract the page title from an encyclopedia article URL.

    Example:
        >>> article_title_from_url("https://en.wikipedia.org/wiki/Artificial_cardiac_pacemaker")
        'Artificial cardiac pacemaker'
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if "wikipedia.org" not in parsed.netloc:
        return None
    if not parsed.path.startswith("/wiki/"):
        return None
    title = unquote(parsed.path[len("/wiki/"):]).replace("_", " ").strip()
    return title or None


def is_anniversary_index(url_or_title: str) -> bool:
    """Portal and selected-anniversary pages list many events by name."""
    text = url_or_title.replace(" ", "_")
    return "Portal:" in text or "Selected_anniversaries" in text


class EncyclopediaClient:
    """
    Async Wikipedia/Wikidata client.

    Attributes:
        cache: Shared ResultCache
        retry_policy: Fixed-delay retry for transient failures
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        entity_url: Optional[str] = None,
        cache: Optional[ResultCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._api_url = api_url or settings.wikipedia_api_url
        self._entity_url = (entity_url or settings.wikidata_entity_url).rstrip("/")
        self.cache = cache if cache is not None else ResultCache()
        self.retry_policy = retry_policy or RetryPolicy.fixed(
            max_attempts=settings.search_max_attempts,
            delay=settings.search_retry_delay,
        )
        self._timeout = timeout or settings.http_timeout
        self._client = http_client
        self.logger = get_logger("sources.encyclopedia")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        client = await self._get_client()
        response = await client.get(url, params=params, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Malformed encyclopedia response from {url}")
        return data

    async def _fetch_extract(self, title: str) -> Optional[str]:
        data = await self.retry_policy.call(
            self._get_json,
            self._api_url,
            {
                "action": "query",
                "prop": "extracts",
                "explaintext": 1,
                "redirects": 1,
                "titles": title,
                "format": "json",
                "formatversion": 2,
            },
        )
        pages = data.get("query", {}).get("pages", [])
        if not pages or pages[0].get("missing"):
            self.logger.warning(f"Encyclopedia page not found: {title}")
            return None
        text = pages[0].get("extract") or ""
        return text or None

    async def digest(self, day: CalendarDay) -> Optional[str]:
        """Plain text of the date page for ``day`` (e.g. "October 8")."""

        async def fetch() -> Optional[str]:
            text = await self._fetch_extract(f"{day.month_name} {day.day}")
            if text:
                self.logger.info(f"Date page {day} fetched ({len(text)} chars)")
            return text

        return await self.cache.get_or_compute(
            "digest", (day.month, day.day), fetch, cache_if=bool
        )

    async def article_text(self, title: str) -> Optional[str]:
        """Plain text of one article, or None when missing."""

        async def fetch() -> Optional[str]:
            text = await self._fetch_extract(title)
            if text:
                self.logger.info(f"Article '{title}' fetched ({len(text)} chars)")
            return text

        return await self.cache.get_or_compute(
            "article", (title,), fetch, cache_if=bool
        )

    async def resolve_title(self, external_id: str) -> Optional[str]:
        """
        Resolve a Wikidata QID to its English Wikipedia title.

        Returns:
            Page title, or None when the entity has no English article
        """
        qid = external_id.strip().upper()
        if not _QID_PATTERN.match(qid):
            self.logger.debug(f"Not a Wikidata identifier: {external_id}")
            return None

        async def fetch() -> Optional[str]:
            data = await self.retry_policy.call(
                self._get_json, f"{self._entity_url}/{qid}.json"
            )
            entity = data.get("entities", {}).get(qid)
            if not entity:
                # Redirected entities come back under their canonical id
                entities = list(data.get("entities", {}).values())
                entity = entities[0] if entities else None
            if not entity:
                return None
            enwiki = entity.get("sitelinks", {}).get("enwiki")
            title = enwiki.get("title") if enwiki else None
            if title:
                self.logger.info(f"Resolved {qid} -> {title}")
            return title

        return await self.cache.get_or_compute("entity-title", (qid,), fetch)
