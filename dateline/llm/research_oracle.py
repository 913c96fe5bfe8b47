"""Research oracle client: date verdicts from a retrieval-augmented LLM.

Talks to Perplexity's OpenAI-compatible chat completions endpoint over
httpx. Responses are free text; the verdict is decoded from line-oriented
``LABEL: value`` pairs with a fallback table that encodes the system's
conservative bias:

    label        missing / unparseable
    VERDICT      UNCLEAR
    CONFIDENCE   LOW
    ACTUAL_DATE  None (no correction possible)
    REASON       "No reason provided"

Labels may appear in any order, in markdown bold, or with spaces instead
of underscores. The first occurrence of a label wins.
"""

import re
from typing import Optional

import httpx

from dateline.config.logging import get_logger
from dateline.config.prompts import (
    DATE_VERDICT_PROMPT,
    NARRATIVE_REWRITE_PROMPT,
    ORACLE_SYSTEM_PROMPT,
)
from dateline.config.settings import settings
from dateline.data_management.result_cache import ResultCache
from dateline.data_management.schemas import (
    CalendarDay,
    CandidateEvent,
    OracleConfidence,
    OracleLabel,
    OracleVerdict,
)
from dateline.llm.retry import RetryPolicy

_LABEL_LINE = re.compile(r"^[\s>*_#\-\d.)]*([A-Za-z][A-Za-z _]*?)[\s*_]*:\s*(.*)$")
_VERDICT_TOKEN = re.compile(r"\b(YES|NO|UNCLEAR)\b")
_CONFIDENCE_TOKEN = re.compile(r"\b(HIGH|MEDIUM|LOW)\b")
_EMPTY_DATE_VALUES = {"", "N/A", "NA", "NONE", "NULL", "-", "UNKNOWN", "SAME"}

_KNOWN_LABELS = {"VERDICT", "CONFIDENCE", "ACTUAL_DATE", "REASON"}

CONTEXT_EXCERPT_CHARS = 300


def _extract_labels(content: str) -> dict[str, str]:
    """Collect the first value seen for each known label."""
    labels: dict[str, str] = {}
    for raw_line in content.splitlines():
        match = _LABEL_LINE.match(raw_line.strip())
        if not match:
            continue
        label = re.sub(r"\s+", "_", match.group(1).strip()).upper()
        if label in _KNOWN_LABELS and label not in labels:
            labels[label] = match.group(2).strip().strip("*").strip()
    return labels


def decode_verdict(content: str) -> OracleVerdict:
    """
    Decode an oracle response into an OracleVerdict.

    Args:
        content: Raw oracle text

    Returns:
        OracleVerdict with fallbacks applied for missing labels
    """
    labels = _extract_labels(content or "")

    verdict = OracleLabel.UNCLEAR
    verdict_match = _VERDICT_TOKEN.search(labels.get("VERDICT", "").upper())
    if verdict_match:
        verdict = OracleLabel(verdict_match.group(1))

    confidence = OracleConfidence.LOW
    confidence_match = _CONFIDENCE_TOKEN.search(labels.get("CONFIDENCE", "").upper())
    if confidence_match:
        confidence = OracleConfidence(confidence_match.group(1))

    actual_date: Optional[str] = None
    if verdict == OracleLabel.NO:
        value = labels.get("ACTUAL_DATE", "").strip("[]\"' ")
        if value.upper() not in _EMPTY_DATE_VALUES:
            actual_date = value

    reason = labels.get("REASON") or "No reason provided"

    return OracleVerdict(
        verdict=verdict,
        confidence=confidence,
        actual_date=actual_date,
        reason=reason,
    )


class ResearchOracleClient:
    """
    Perplexity chat client with exponential backoff and result caching.

    Attributes:
        model: Oracle model identifier
        retry_policy: Bounded retry applied to every completion call
        cache: Shared ResultCache (verdicts and narrative rewrites)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        cache: Optional[ResultCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize oracle client.

        Raises:
            ValueError: If no API key is configured
        """
        self._api_key = api_key or settings.perplexity_api_key
        if not self._api_key:
            raise ValueError("PERPLEXITY_API_KEY not configured in environment")

        self.model = model or settings.perplexity_model
        self._base_url = (base_url or settings.perplexity_base_url).rstrip("/")
        self.cache = cache if cache is not None else ResultCache()
        self.retry_policy = retry_policy or RetryPolicy.exponential(
            max_attempts=settings.oracle_max_attempts
        )
        self._timeout = timeout or settings.http_timeout
        self._client = http_client
        self.logger = get_logger("llm.research_oracle")

        self.logger.info(f"Research oracle client initialized with model {self.model}")

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

    async def _post_completion(self, prompt: str, temperature: float, max_tokens: int) -> str:
        client = await self._get_client()
        response = await client.post(
            f"{self._base_url}/chat/completions",
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": ORACLE_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        response.raise_for_status()
        payload = response.json()
        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Malformed oracle response: {e}") from e
        return (content or "").strip()

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 4000,
    ) -> str:
        """
        Send a prompt to the oracle, retrying transient failures.

        Raises:
            httpx.HTTPError: Transport or status failure after retries
            ValueError: Malformed response after retries
        """
        return await self.retry_policy.call(
            self._post_completion, prompt, temperature, max_tokens
        )

    async def assess_date(self, event: CandidateEvent, day: CalendarDay) -> OracleVerdict:
        """
        Ask whether the event happened on ``day`` in ``event.year``.

        Cached by (title, month, day, year). Failures propagate uncached.
        """

        async def fetch() -> OracleVerdict:
            prompt = DATE_VERDICT_PROMPT.format(
                title=event.title,
                month_name=day.month_name,
                day=day.day,
                year=event.year,
                context=event.narrative_text[:CONTEXT_EXCERPT_CHARS],
            )
            content = await self.complete(prompt)
            self.logger.debug(f"Oracle response: {content[:400]}")
            return decode_verdict(content)

        verdict = await self.cache.get_or_compute(
            "oracle-verdict",
            (event.title, day.month, day.day, event.year),
            fetch,
        )
        self.logger.info(
            f"Oracle verdict {verdict.verdict.value} ({verdict.confidence.value}) "
            f"for '{event.title}'"
        )
        return verdict

    async def rewrite_narrative(
        self,
        event: CandidateEvent,
        old_year: int,
        new_year: int,
        reason: str,
    ) -> str:
        """Regenerate the event narrative for a corrected year."""

        async def fetch() -> str:
            prompt = NARRATIVE_REWRITE_PROMPT.format(
                title=event.title,
                old_year=old_year,
                new_year=new_year,
                context=event.narrative_text,
                reason=reason,
            )
            return await self.complete(prompt)

        return await self.cache.get_or_compute(
            "narrative-rewrite",
            (event.title, old_year, new_year),
            fetch,
            cache_if=bool,
        )
