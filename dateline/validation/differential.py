"""Search-based validation (Tier 3) with two interchangeable strategies.

differential
    Three searches differing only in the embedded date: a keyword baseline
    without a date, the claim anchored to the claimed date, and the claim
    anchored to the claimed date shifted by a week. Retention is each dated
    query's result count over the baseline count; title matches count dated
    results whose titles mention their date. If the wrong date retains more
    than the claimed date, the claim is falsified.

trust_scored
    One keyword query constrained by multilingual date strings. The result
    set is scored against the domain trust tables and accepted on count and
    score thresholds, or when the excerpt judge confirms one of the top three
    results. Zero-result and unverified outcomes retry the whole tier.

Both return a TierResult whose evidence carries the result set forward, so
the content tier never re-issues the search.
"""

from typing import Literal, Optional

import structlog

from dateline.config.settings import settings
from dateline.data_management.schemas import (
    CalendarDay,
    CandidateEvent,
    SearchResult,
    TierOutcome,
    TierResult,
)
from dateline.llm.retry import RetryPolicy
from dateline.sources.search_client import SearchClient
from dateline.validation.content_verifier import ContentVerifier
from dateline.validation.domain_scorer import DomainScorer
from dateline.validation.text_matching import (
    keyword_query,
    mentions_date,
    multilingual_date_strings,
    shift_day,
)

SearchStrategy = Literal["differential", "trust_scored"]

DIFFERENTIAL_NUM_RESULTS = 20
TRUST_SCORED_NUM_RESULTS = 20
WRONG_DATE_SHIFT_DAYS = 7

STRONG_RETENTION = 0.6
MODERATE_RETENTION = 0.4
MODERATE_MIN_TITLE_MATCHES = 2

STRONG_SIGNAL_MIN_RESULTS = 5
STRONG_SIGNAL_MIN_SCORE = 3.0
GOOD_SIGNAL_MIN_RESULTS = 3
EXCERPT_CHECK_TOP_N = 3


def dated_query(event: CandidateEvent, day: CalendarDay) -> str:
    """Natural-language query anchoring the claim to one calendar day."""
    return f"{event.title} on {day.month_name} {day.day}, {event.year}"


def title_matches(results: list[SearchResult], day: CalendarDay) -> int:
    return sum(1 for r in results if r.title and mentions_date(r.title, day))


def judge_differential(
    baseline: int,
    correct: int,
    wrong: int,
    correct_titles: int,
    wrong_titles: int,
) -> tuple[TierOutcome, str]:
    """
    Decide a differential comparison.

    Rules, first match wins:
        empty baseline                         -> FAIL differential-no-results
        wrong retention > correct retention    -> FAIL differential-falsification-failed
        retention >= 0.6 and >= 1 title match  -> PASS differential-strong
        title dominance                        -> PASS differential-title-dominance
        0.4 <= retention < 0.6, >= 2 titles    -> PASS differential-moderate-with-titles
        retention < 0.4                        -> FAIL differential-low
        otherwise                              -> INCONCLUSIVE differential-inconclusive

    Title dominance is >= 5 correct-date title matches against none, or
    >= 3 against fewer than 2 with more than twice as many.
    """
    if baseline <= 0:
        return TierOutcome.FAIL, "differential-no-results"

    retention = correct / baseline
    wrong_retention = wrong / baseline

    if wrong_retention > retention:
        return TierOutcome.FAIL, "differential-falsification-failed"

    if retention >= STRONG_RETENTION and correct_titles >= 1:
        return TierOutcome.PASS, "differential-strong"

    dominant = (correct_titles >= 5 and wrong_titles == 0) or (
        correct_titles >= 3 and wrong_titles < 2 and correct_titles > 2 * wrong_titles
    )
    if dominant:
        return TierOutcome.PASS, "differential-title-dominance"

    if MODERATE_RETENTION <= retention < STRONG_RETENTION:
        if correct_titles >= MODERATE_MIN_TITLE_MATCHES:
            return TierOutcome.PASS, "differential-moderate-with-titles"
        return TierOutcome.INCONCLUSIVE, "differential-inconclusive"

    if retention < MODERATE_RETENTION:
        return TierOutcome.FAIL, "differential-low"

    return TierOutcome.INCONCLUSIVE, "differential-inconclusive"


class DifferentialSearchValidator:
    """Tier 3 validator; the strategy is fixed at construction.

    Args:
        search: Search backend client
        strategy: "differential" or "trust_scored"
        scorer: Domain trust scorer (trust_scored)
        verifier: Excerpt checker for the top results (trust_scored); when
            absent, unverified result sets simply fail
        retry_policy: Whole-tier retry for trust_scored zero-result and
            unverified outcomes; exceptions are left to the collaborators'
            own retries
    """

    def __init__(
        self,
        search: SearchClient,
        strategy: SearchStrategy = "differential",
        scorer: Optional[DomainScorer] = None,
        verifier: Optional[ContentVerifier] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        if strategy not in ("differential", "trust_scored"):
            raise ValueError(f"Unknown search strategy: {strategy}")
        self.search = search
        self.strategy = strategy
        self.scorer = scorer or DomainScorer()
        self.verifier = verifier
        self.retry_policy = (retry_policy or RetryPolicy.fixed(
            max_attempts=settings.search_max_attempts,
            delay=settings.search_retry_delay,
        )).results_only()
        self._logger = structlog.get_logger().bind(component="DifferentialSearchValidator")

    async def validate(self, event: CandidateEvent, day: CalendarDay) -> TierResult:
        if self.strategy == "trust_scored":
            return await self._trust_scored(event, day)
        return await self._differential(event, day)

    # ── Differential falsification ──────────────────────────────────────

    async def _differential(self, event: CandidateEvent, day: CalendarDay) -> TierResult:
        wrong_day = shift_day(day, event.year, WRONG_DATE_SHIFT_DAYS)

        baseline = await self.search.search(
            keyword_query(event), num_results=DIFFERENTIAL_NUM_RESULTS
        )
        correct = await self.search.search(
            dated_query(event, day), num_results=DIFFERENTIAL_NUM_RESULTS
        )
        wrong = await self.search.search(
            dated_query(event, wrong_day), num_results=DIFFERENTIAL_NUM_RESULTS
        )

        correct_titles = title_matches(correct, day)
        wrong_titles = title_matches(wrong, wrong_day)
        outcome, reason = judge_differential(
            baseline=len(baseline),
            correct=len(correct),
            wrong=len(wrong),
            correct_titles=correct_titles,
            wrong_titles=wrong_titles,
        )

        retention = len(correct) / len(baseline) if baseline else 0.0
        self._logger.info(
            "differential_compared",
            title=event.title,
            baseline=len(baseline),
            correct=len(correct),
            wrong=len(wrong),
            correct_titles=correct_titles,
            wrong_titles=wrong_titles,
            retention=round(retention, 3),
            outcome=outcome.value,
            reason=reason,
        )

        return TierResult(
            tier="tier3",
            outcome=outcome,
            reason_code=reason,
            evidence={
                "results": correct or baseline,
                "retention": retention,
                "correct_titles": correct_titles,
                "wrong_titles": wrong_titles,
            },
        )

    # ── Trust-scored single query ───────────────────────────────────────

    async def _trust_scored(self, event: CandidateEvent, day: CalendarDay) -> TierResult:
        query = keyword_query(event)
        date_filters = multilingual_date_strings(day)

        async def attempt() -> TierResult:
            return await self._trust_scored_attempt(event, day, query, date_filters)

        result = await self.retry_policy.call(
            attempt, retry_if_result_fn=lambda r: not r.passed
        )
        self._logger.info(
            "trust_scored_finished",
            title=event.title,
            outcome=result.outcome.value,
            reason=result.reason_code,
        )
        return result

    async def _trust_scored_attempt(
        self,
        event: CandidateEvent,
        day: CalendarDay,
        query: str,
        date_filters: list[str],
    ) -> TierResult:
        results = await self.search.search(
            query,
            num_results=TRUST_SCORED_NUM_RESULTS,
            include_text=date_filters,
            with_text=True,
        )
        if not results:
            return TierResult(
                tier="tier3",
                outcome=TierOutcome.FAIL,
                reason_code="search-no-results",
                evidence={"results": []},
            )

        quality = self.scorer.score(results)
        evidence = {"results": results, "quality": quality}
        self._logger.debug(
            "trust_scored_quality",
            results=len(results),
            score=quality.score,
            high_trust=quality.high_trust_count,
            historical=quality.historical_count,
        )

        if len(results) >= STRONG_SIGNAL_MIN_RESULTS and quality.score >= STRONG_SIGNAL_MIN_SCORE:
            return TierResult(
                tier="tier3",
                outcome=TierOutcome.PASS,
                reason_code="search-strong-signal",
                evidence=evidence,
            )

        if len(results) >= GOOD_SIGNAL_MIN_RESULTS and quality.high_trust_count > 0:
            return TierResult(
                tier="tier3",
                outcome=TierOutcome.PASS,
                reason_code="search-good-signal",
                evidence=evidence,
            )

        if self.verifier is not None:
            check = await self.verifier.verify(event, day, results, top_n=EXCERPT_CHECK_TOP_N)
            evidence["content_check"] = check
            if check.confirmed >= 1:
                return TierResult(
                    tier="tier3",
                    outcome=TierOutcome.PASS,
                    reason_code="search-excerpt-verified",
                    evidence=evidence,
                )

        return TierResult(
            tier="tier3",
            outcome=TierOutcome.FAIL,
            reason_code="search-unverified",
            evidence=evidence,
        )
