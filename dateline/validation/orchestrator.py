"""Tier orchestrator: drives one candidate event to a terminal verdict.

Tiers run strictly in order, cheapest first, and the first conclusive
signal wins:

    tier0  digest scan            PASS -> accept
    tier1  canonical article      PASS -> accept, FAIL (date mismatch) -> reject
    tier2  research oracle        YES -> accept, NO -> year correction or reject
    tier3  search validation      PASS -> accept, FAIL -> reject
    tier4  content verification   PASS -> accept, otherwise reject

Escalation happens only when a tier is INCONCLUSIVE (or skipped). Backend
failures never escape: each tier call is guarded and an exception becomes
an INCONCLUSIVE result with a ``*-error`` reason code, so the next tier
still runs and every event ends in a ValidationVerdict.

Which kinds enter tiers 0 and 1, and which search strategy tier 3 uses,
is fixed at construction by a ValidationProfile.

Usage:
    orchestrator = TierOrchestrator(
        encyclopedia=encyclopedia,
        oracle=oracle,
        search=search,
        judge=judge,
        profile=ValidationProfile.differential(),
    )
    verdict = await orchestrator.validate(event)
"""

from typing import Awaitable, Literal, Optional

import structlog
from pydantic import BaseModel

from dateline.config.settings import settings
from dateline.data_management.schemas import (
    CalendarDay,
    CandidateEvent,
    OracleLabel,
    OracleVerdict,
    TierOutcome,
    TierResult,
    ValidationVerdict,
)
from dateline.llm.gemini_client import GeminiClient
from dateline.llm.research_oracle import ResearchOracleClient
from dateline.sources.encyclopedia_client import EncyclopediaClient
from dateline.sources.search_client import SearchClient
from dateline.validation.content_verifier import ContentVerifier
from dateline.validation.differential import DifferentialSearchValidator, SearchStrategy
from dateline.validation.domain_scorer import DomainScorer
from dateline.validation.snapshot_tiers import ArticleScanner, DigestScanner
from dateline.validation.year_corrector import YearCorrector

CONTENT_CHECK_TOP_N = 2


class ValidationProfile(BaseModel):
    """Variant switches chosen when the orchestrator is built.

    Attributes:
        search_strategy: Tier 3 strategy
        snapshot_scope: "all" runs tiers 0/1 for every kind; "people" runs
            tier 0 only for births/deaths and tier 1 only for births/deaths
            carrying an external id
    """

    search_strategy: SearchStrategy = "differential"
    snapshot_scope: Literal["all", "people"] = "all"

    model_config = {"frozen": True}

    @classmethod
    def differential(cls) -> "ValidationProfile":
        return cls(search_strategy="differential", snapshot_scope="all")

    @classmethod
    def trust_scored(cls) -> "ValidationProfile":
        return cls(search_strategy="trust_scored", snapshot_scope="people")

    @classmethod
    def from_settings(cls) -> "ValidationProfile":
        if settings.search_strategy == "trust_scored":
            return cls.trust_scored()
        return cls.differential()


def _has_encyclopedia_link(event: CandidateEvent) -> bool:
    return any("wikipedia.org" in link for link in event.source_links)


class TierOrchestrator:
    """State machine sequencing the validation tiers for one event at a time."""

    def __init__(
        self,
        encyclopedia: EncyclopediaClient,
        oracle: ResearchOracleClient,
        search: SearchClient,
        judge: Optional[GeminiClient] = None,
        profile: Optional[ValidationProfile] = None,
        year_corrector: Optional[YearCorrector] = None,
        search_validator: Optional[DifferentialSearchValidator] = None,
        content_verifier: Optional[ContentVerifier] = None,
    ) -> None:
        """Initialize TierOrchestrator.

        Args:
            encyclopedia: Snapshot client for tiers 0 and 1.
            oracle: Research oracle for tier 2 and narrative rewrites.
            search: Search/content backend for tiers 3 and 4.
            judge: Cheap excerpt judge. Without it, excerpt checks are skipped.
            profile: Variant switches (defaults to the differential profile).
            year_corrector: Override for the year correction sub-protocol.
            search_validator: Override for the tier 3 validator.
            content_verifier: Override for the excerpt checker.
        """
        self.profile = profile or ValidationProfile.differential()
        self.oracle = oracle
        self.digest_scanner = DigestScanner(encyclopedia)
        self.article_scanner = ArticleScanner(encyclopedia, judge)
        self.year_corrector = year_corrector or YearCorrector(oracle)

        if content_verifier is None and judge is not None:
            content_verifier = ContentVerifier(search, judge)
        self.content_verifier = content_verifier

        self.search_validator = search_validator or DifferentialSearchValidator(
            search,
            strategy=self.profile.search_strategy,
            scorer=DomainScorer(),
            verifier=self.content_verifier,
        )
        self._logger = structlog.get_logger().bind(component="TierOrchestrator")

    async def _guarded(
        self,
        tier: str,
        error_code: str,
        call: Awaitable[TierResult],
    ) -> TierResult:
        """Await a tier, converting any exception into an INCONCLUSIVE result."""
        self._logger.debug("tier_started", tier=tier)
        try:
            result = await call
        except Exception as e:
            self._logger.warning(
                "tier_error",
                tier=tier,
                reason=error_code,
                error=f"{type(e).__name__}: {e}",
            )
            return TierResult(
                tier=tier,
                outcome=TierOutcome.INCONCLUSIVE,
                reason_code=error_code,
                evidence={"error": str(e)},
            )
        self._logger.info(
            "tier_finished",
            tier=tier,
            outcome=result.outcome.value,
            reason=result.reason_code,
        )
        return result

    def _runs_digest(self, event: CandidateEvent) -> bool:
        if self.profile.snapshot_scope == "people":
            return event.kind.is_person
        return True

    def _runs_article(self, event: CandidateEvent) -> bool:
        if self.profile.snapshot_scope == "people":
            return event.kind.is_person and bool(event.external_id)
        return bool(event.external_id) or _has_encyclopedia_link(event)

    async def validate(
        self,
        event: CandidateEvent,
        claimed_date: Optional[CalendarDay] = None,
    ) -> ValidationVerdict:
        """Validate one event against a calendar day.

        Args:
            event: Candidate event (``year`` and ``narrative_text`` may be
                rewritten by a year correction).
            claimed_date: Day under test; defaults to ``event.claimed_date``.

        Returns:
            Terminal ValidationVerdict. Never raises.
        """
        day = claimed_date or event.claimed_date
        self._logger.info(
            "validation_started",
            title=event.title,
            kind=event.kind.value,
            date=f"{day}, {event.year}",
        )
        try:
            verdict = await self._run_tiers(event, day)
        except Exception as e:
            self._logger.error("validation_crashed", title=event.title, error=str(e))
            verdict = ValidationVerdict.reject("orchestrator", "internal-error", [])

        self._logger.info(
            "validation_finished",
            title=event.title,
            accepted=verdict.accepted,
            method=verdict.method,
            reason=verdict.reason_code,
        )
        return verdict

    async def _run_tiers(self, event: CandidateEvent, day: CalendarDay) -> ValidationVerdict:
        trail: list[TierResult] = []

        # Tier 0
        if self._runs_digest(event):
            tier0 = await self._guarded(
                "tier0", "digest-error", self.digest_scanner.scan(event, day)
            )
            trail.append(tier0)
            if tier0.passed:
                return ValidationVerdict.accept("tier0", tier0.reason_code, trail)

        # Tier 1
        if self._runs_article(event):
            tier1 = await self._guarded(
                "tier1", "encyclopedia-error", self.article_scanner.scan(event, day)
            )
            trail.append(tier1)
            if tier1.passed:
                return ValidationVerdict.accept("tier1", tier1.reason_code, trail)
            if tier1.failed:
                return ValidationVerdict.reject("tier1", tier1.reason_code, trail)

        # Tier 2
        tier2 = await self._guarded("tier2", "oracle-error", self._consult_oracle(event, day))
        trail.append(tier2)
        if tier2.passed:
            return ValidationVerdict.accept("tier2", tier2.reason_code, trail)
        if tier2.failed:
            oracle_verdict: OracleVerdict = tier2.evidence
            if oracle_verdict.actual_date:
                correction = await self.year_corrector.correct(
                    event, oracle_verdict.actual_date, oracle_verdict.reason, day=day
                )
                if correction.corrected:
                    return ValidationVerdict.accept(
                        "tier2-corrected", "year-auto-corrected", trail, correction=correction
                    )
            return ValidationVerdict.reject("tier2", "tier2-no", trail)

        # Tier 3
        tier3 = await self._guarded(
            "tier3", "search-error", self.search_validator.validate(event, day)
        )
        trail.append(tier3)
        if tier3.passed:
            return ValidationVerdict.accept("tier3", tier3.reason_code, trail)
        if tier3.failed:
            return ValidationVerdict.reject("tier3", tier3.reason_code, trail)

        # Tier 4
        tier4 = await self._guarded(
            "tier4", "content-error", self._verify_content(event, day, tier3)
        )
        trail.append(tier4)
        if tier4.passed:
            return ValidationVerdict.accept("tier4", tier4.reason_code, trail)
        return ValidationVerdict.reject("tier4", tier4.reason_code, trail)

    async def _consult_oracle(self, event: CandidateEvent, day: CalendarDay) -> TierResult:
        verdict = await self.oracle.assess_date(event, day)
        if verdict.verdict == OracleLabel.YES:
            outcome, reason = TierOutcome.PASS, "oracle-confirmed"
        elif verdict.verdict == OracleLabel.NO:
            outcome, reason = TierOutcome.FAIL, "tier2-no"
        else:
            outcome, reason = TierOutcome.INCONCLUSIVE, "oracle-unclear"
        return TierResult(tier="tier2", outcome=outcome, reason_code=reason, evidence=verdict)

    async def _verify_content(
        self,
        event: CandidateEvent,
        day: CalendarDay,
        previous: TierResult,
    ) -> TierResult:
        results = []
        if isinstance(previous.evidence, dict):
            results = previous.evidence.get("results") or []

        if not results:
            return TierResult(
                tier="tier4", outcome=TierOutcome.FAIL, reason_code="content-no-sources"
            )
        if self.content_verifier is None:
            self._logger.info("content_judge_unavailable", title=event.title)
            return TierResult(
                tier="tier4", outcome=TierOutcome.FAIL, reason_code="content-unverified"
            )

        check = await self.content_verifier.verify(
            event, day, results, top_n=CONTENT_CHECK_TOP_N
        )
        if check.confirmed >= 1:
            outcome, reason = TierOutcome.PASS, "content-verified"
        else:
            outcome, reason = TierOutcome.FAIL, "content-unverified"
        return TierResult(tier="tier4", outcome=outcome, reason_code=reason, evidence=check)
