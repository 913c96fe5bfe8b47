"""Encyclopedia snapshot tiers: day digest scan (Tier 0) and canonical article scan (Tier 1).

Both tiers are free and high precision. Tier 0 looks the claim up on the
year-independent date page; Tier 1 reads the event's own article and looks
for the claimed day. A Tier 1 date miss on a non-person article is the one
negative signal strong enough to end validation early.

Usage:
    from dateline.validation.snapshot_tiers import DigestScanner, ArticleScanner

    scanner = DigestScanner(encyclopedia)
    result = await scanner.scan(event, day)
"""

from typing import Optional

import structlog

from dateline.config.prompts import ARTICLE_EXCERPT_PROMPT, ARTICLE_JUDGE_SYSTEM_PROMPT
from dateline.data_management.schemas import (
    CalendarDay,
    CandidateEvent,
    EventKind,
    ExcerptAnswer,
    TierOutcome,
    TierResult,
)
from dateline.llm.gemini_client import GeminiClient
from dateline.sources.encyclopedia_client import (
    EncyclopediaClient,
    article_title_from_url,
    is_anniversary_index,
)
from dateline.validation.text_matching import (
    extract_person_name,
    find_date_mention,
    keyword_terms,
    surname,
)

ARTICLE_EXCERPT_CHARS = 1000
MIN_KEYWORD_HITS = 2
MAX_DIGEST_KEYWORDS = 10


class DigestScanner:
    """Tier 0: scan the "On this day" date page.

    Person kinds match by name: the full extracted name, or a distinctive
    surname together with the year. Ordinary events need the year plus
    either the full title or at least two keywords.
    """

    def __init__(self, encyclopedia: EncyclopediaClient) -> None:
        self.encyclopedia = encyclopedia
        self._logger = structlog.get_logger().bind(component="DigestScanner")

    async def scan(self, event: CandidateEvent, day: CalendarDay) -> TierResult:
        text = await self.encyclopedia.digest(day)
        if not text:
            self._logger.info("digest_unavailable", day=str(day))
            return TierResult(
                tier="tier0",
                outcome=TierOutcome.INCONCLUSIVE,
                reason_code="digest-unavailable",
            )

        lowered = text.lower()
        year = str(event.year)
        has_year = year in lowered

        if event.kind.is_person:
            name = extract_person_name(event.title, event.kind)
            if name and name.lower() in lowered:
                return self._passed("digest-name-confirmed", name=name)
            last = surname(name) if name else None
            if last and last.lower() in lowered and has_year:
                return self._passed("digest-name-confirmed", name=last)

        title_found = event.title.lower() in lowered
        keyword_hits = [
            term for term in keyword_terms(event, limit=MAX_DIGEST_KEYWORDS)
            if term.lower() in lowered
        ]

        self._logger.debug(
            "digest_scan",
            title_found=title_found,
            has_year=has_year,
            keyword_hits=len(keyword_hits),
        )

        if has_year and (title_found or len(keyword_hits) >= MIN_KEYWORD_HITS):
            return self._passed("digest-confirmed", keywords=keyword_hits)

        return TierResult(
            tier="tier0",
            outcome=TierOutcome.INCONCLUSIVE,
            reason_code="not-in-digest",
        )

    def _passed(self, reason_code: str, **evidence) -> TierResult:
        self._logger.info("digest_confirmed", reason=reason_code)
        return TierResult(
            tier="tier0",
            outcome=TierOutcome.PASS,
            reason_code=reason_code,
            evidence=evidence,
        )


class ArticleScanner:
    """Tier 1: scan the event's canonical encyclopedia article.

    The article comes from the first encyclopedia link in the event's
    sources, or from resolving its external id. Anniversary index pages and
    person kinds match by name first; every article is then searched for
    the claimed day in six orderings. For person kinds a pattern miss may
    still be confirmed by the excerpt judge.

    A date miss on a non-person article FAILS (definitive). A person miss
    is INCONCLUSIVE so the oracle gets a say.
    """

    def __init__(
        self,
        encyclopedia: EncyclopediaClient,
        judge: Optional[GeminiClient] = None,
    ) -> None:
        self.encyclopedia = encyclopedia
        self.judge = judge
        self._logger = structlog.get_logger().bind(component="ArticleScanner")

    async def _resolve_source(self, event: CandidateEvent) -> Optional[str]:
        for link in event.source_links:
            if "wikipedia.org" in link and article_title_from_url(link):
                return link
        if event.external_id:
            title = await self.encyclopedia.resolve_title(event.external_id)
            if title:
                return f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}"
        return None

    async def scan(self, event: CandidateEvent, day: CalendarDay) -> TierResult:
        source = await self._resolve_source(event)
        if not source:
            self._logger.info("no_encyclopedia_source", title=event.title)
            return TierResult(
                tier="tier1",
                outcome=TierOutcome.INCONCLUSIVE,
                reason_code="no-encyclopedia-source",
            )

        page_title = article_title_from_url(source)
        text = await self.encyclopedia.article_text(page_title) if page_title else None
        if not text:
            return TierResult(
                tier="tier1",
                outcome=TierOutcome.INCONCLUSIVE,
                reason_code="encyclopedia-article-unavailable",
                evidence={"source": source},
            )

        index_page = is_anniversary_index(source)
        name = extract_person_name(event.title, event.kind)
        if index_page and not name:
            name = event.title

        if (index_page or event.kind.is_person) and name:
            if name.lower() in text.lower():
                return self._passed("article-name-confirmed", source, name=name)

        pattern = find_date_mention(text, day)
        self._logger.debug("article_date_scan", source=source, pattern=pattern)
        if pattern:
            return self._passed("article-date-confirmed", source, pattern=pattern)

        if not event.kind.is_person:
            self._logger.info("article_date_mismatch", source=source, day=str(day))
            return TierResult(
                tier="tier1",
                outcome=TierOutcome.FAIL,
                reason_code="wiki-date-mismatch",
                evidence={"source": source},
            )

        if self.judge is not None and name:
            answer = await self._ask_judge(event, day, name, text)
            if answer == ExcerptAnswer.YES:
                return self._passed("article-excerpt-confirmed", source, name=name)

        return TierResult(
            tier="tier1",
            outcome=TierOutcome.INCONCLUSIVE,
            reason_code="article-date-unconfirmed",
            evidence={"source": source},
        )

    async def _ask_judge(
        self,
        event: CandidateEvent,
        day: CalendarDay,
        name: str,
        text: str,
    ) -> ExcerptAnswer:
        action = "was born" if event.kind == EventKind.PERSON_BIRTH else "died"
        prompt = ARTICLE_EXCERPT_PROMPT.format(
            name=name,
            action=action,
            month_name=day.month_name,
            day=day.day,
            excerpt=text[:ARTICLE_EXCERPT_CHARS],
        )
        answer = await self.judge.judge(ARTICLE_JUDGE_SYSTEM_PROMPT, prompt)
        self._logger.info("article_excerpt_judged", name=name, answer=answer.value)
        return answer

    def _passed(self, reason_code: str, source: str, **evidence) -> TierResult:
        self._logger.info("article_confirmed", reason=reason_code, source=source)
        return TierResult(
            tier="tier1",
            outcome=TierOutcome.PASS,
            reason_code=reason_code,
            evidence={"source": source, **evidence},
        )
