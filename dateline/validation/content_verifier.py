"""Cheap-model content checks against the top search results.

For each of the top N results: take the result text (fetching it from the
content backend when the search did not return it), skip sources shorter
than 100 characters, and ask the excerpt judge a strict YES / NO / UNCLEAR
question about the first 600 characters. Successive checks are paced.

Used by the trust-scored search tier (top 3) and by the final content tier
(top 2).
"""

from typing import Optional

import structlog

from dateline.config.prompts import SOURCE_EXCERPT_PROMPT, SOURCE_JUDGE_SYSTEM_PROMPT
from dateline.config.settings import settings
from dateline.data_management.schemas import (
    CalendarDay,
    CandidateEvent,
    ContentCheck,
    ExcerptAnswer,
    SearchResult,
)
from dateline.llm.gemini_client import GeminiClient
from dateline.llm.rate_limiter import CallPacer
from dateline.sources.search_client import SearchClient

MIN_SOURCE_CHARS = 100
SOURCE_EXCERPT_CHARS = 600


class ContentVerifier:
    """Asks the excerpt judge whether source text confirms the claimed day."""

    def __init__(
        self,
        search: SearchClient,
        judge: GeminiClient,
        pacer: Optional[CallPacer] = None,
    ) -> None:
        self.search = search
        self.judge = judge
        self.pacer = pacer or CallPacer(settings.search_pacing_delay)
        self._logger = structlog.get_logger().bind(component="ContentVerifier")

    async def _source_text(self, result: SearchResult) -> Optional[str]:
        if result.text:
            return result.text
        texts = await self.search.contents([result.id])
        return texts.get(result.id)

    async def verify(
        self,
        event: CandidateEvent,
        day: CalendarDay,
        results: list[SearchResult],
        top_n: int = 2,
    ) -> ContentCheck:
        """Check the first ``top_n`` results.

        Per-source failures are logged and skipped. If every source failed
        with an error, the last error is raised so the caller can report a
        backend failure rather than an unverified claim.

        Returns:
            ContentCheck(confirmed, checked, total)
        """
        candidates = results[:top_n]
        confirmed = 0
        checked = 0
        errors: list[Exception] = []

        for index, result in enumerate(candidates, start=1):
            try:
                text = await self._source_text(result)
            except Exception as e:
                self._logger.warning("content_fetch_failed", url=result.url, error=str(e))
                errors.append(e)
                continue

            if not text or len(text) < MIN_SOURCE_CHARS:
                self._logger.debug("content_too_short", url=result.url)
                continue

            prompt = SOURCE_EXCERPT_PROMPT.format(
                title=event.title,
                month_name=day.month_name,
                day=day.day,
                excerpt=text[:SOURCE_EXCERPT_CHARS],
            )
            await self.pacer.wait()
            try:
                answer = await self.judge.judge(SOURCE_JUDGE_SYSTEM_PROMPT, prompt)
            except Exception as e:
                self._logger.warning("excerpt_judge_failed", url=result.url, error=str(e))
                errors.append(e)
                continue

            checked += 1
            if answer == ExcerptAnswer.YES:
                confirmed += 1
            self._logger.info(
                "source_judged",
                position=index,
                url=result.url[:80],
                answer=answer.value,
            )

        if errors and checked == 0 and len(errors) == len(candidates):
            raise errors[-1]

        return ContentCheck(confirmed=confirmed, checked=checked, total=len(candidates))
