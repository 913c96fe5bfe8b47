"""Neural/keyword search and content-fetch client for the Exa API.

Every search is paced (a cooperative delay between successive calls),
retried with the injected fixed-delay policy, and memoized in the shared
ResultCache keyed by the full query text plus option set. Empty result
sets are not memoized so a tier-level retry re-issues the query.

Usage:
    from dateline.sources.search_client import SearchClient

    client = SearchClient(cache=cache)
    results = await client.search("pacemaker implanted 1958", num_results=20)
    texts = await client.contents([r.id for r in results[:2]])
"""

from typing import Any, Optional

import httpx

from dateline.config.domain_trust import EXCLUDED_DOMAINS
from dateline.config.logging import get_logger
from dateline.config.settings import settings
from dateline.data_management.result_cache import ResultCache
from dateline.data_management.schemas import SearchResult
from dateline.llm.rate_limiter import CallPacer
from dateline.llm.retry import RetryPolicy

DEFAULT_NUM_RESULTS = 15
MAX_TEXT_CHARACTERS = 5000


class SearchClient:
    """
    Async client for Exa ``/search`` and ``/contents``.

    Attributes:
        cache: Shared ResultCache
        retry_policy: Fixed-delay retry for transient failures
        pacer: Inter-call delay between successive search calls
        excluded_domains: Hosts excluded from every search
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        cache: Optional[ResultCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
        pacer: Optional[CallPacer] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        excluded_domains: Optional[list[str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize search client.

        Raises:
            ValueError: If no API key is configured
        """
        self._api_key = api_key or settings.exa_api_key
        if not self._api_key:
            raise ValueError("EXA_API_KEY not configured in environment")

        self._base_url = (base_url or settings.exa_base_url).rstrip("/")
        self.cache = cache if cache is not None else ResultCache()
        self.retry_policy = retry_policy or RetryPolicy.fixed(
            max_attempts=settings.search_max_attempts,
            delay=settings.search_retry_delay,
        )
        self.pacer = pacer or CallPacer(settings.search_pacing_delay)
        self.excluded_domains = list(excluded_domains or EXCLUDED_DOMAINS)
        self._timeout = timeout or settings.http_timeout
        self._client = http_client
        self.logger = get_logger("sources.search")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        await self.pacer.wait()
        client = await self._get_client()
        response = await client.post(
            f"{self._base_url}{path}",
            json=payload,
            headers={"x-api-key": self._api_key},
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Malformed search response from {path}")
        return data

    @staticmethod
    def _parse_results(data: dict[str, Any]) -> list[SearchResult]:
        raw = data.get("results")
        if not isinstance(raw, list):
            return []
        results: list[SearchResult] = []
        for item in raw:
            if not isinstance(item, dict) or not item.get("id"):
                continue
            results.append(
                SearchResult(
                    id=str(item["id"]),
                    url=item.get("url") or "",
                    title=item.get("title") or "",
                    text=item.get("text"),
                )
            )
        return results

    async def search(
        self,
        query: str,
        num_results: int = DEFAULT_NUM_RESULTS,
        include_text: Optional[list[str]] = None,
        with_text: bool = False,
    ) -> list[SearchResult]:
        """
        Run one neural search.

        Args:
            query: Query text
            num_results: Result count requested
            include_text: Inline text filters; results must contain one of them
            with_text: Ask for page text alongside each hit

        Returns:
            Ordered list of SearchResult (possibly empty)
        """
        options = {
            "num_results": num_results,
            "include_text": list(include_text or []),
            "with_text": with_text,
            "exclude": sorted(self.excluded_domains),
        }

        async def fetch() -> list[SearchResult]:
            payload: dict[str, Any] = {
                "query": query,
                "numResults": num_results,
                "type": "neural",
                "useAutoprompt": False,
                "excludeDomains": self.excluded_domains,
            }
            if include_text:
                payload["includeText"] = list(include_text)
            if with_text or include_text:
                payload["contents"] = {
                    "text": {"includeHtmlTags": False, "maxCharacters": MAX_TEXT_CHARACTERS}
                }
            data = await self.retry_policy.call(self._post, "/search", payload)
            results = self._parse_results(data)
            self.logger.info(f"Search returned {len(results)} results for '{query[:60]}'")
            return results

        return await self.cache.get_or_compute(
            "search", (query, options), fetch, cache_if=bool
        )

    async def contents(self, ids: list[str]) -> dict[str, str]:
        """
        Fetch full page text for result ids.

        Returns:
            Mapping of id to text (ids without text are omitted)
        """
        if not ids:
            return {}

        async def fetch() -> dict[str, str]:
            data = await self.retry_policy.call(
                self._post, "/contents", {"ids": list(ids), "text": True}
            )
            texts = {r.id: r.text for r in self._parse_results(data) if r.text}
            self.logger.debug(f"Fetched contents for {len(texts)}/{len(ids)} ids")
            return texts

        return await self.cache.get_or_compute(
            "contents", (sorted(ids),), fetch, cache_if=bool
        )
