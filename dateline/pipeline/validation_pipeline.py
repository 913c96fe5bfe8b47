"""Sequential batch validation for one calendar day.

Events are validated one at a time with a short pause between them. A
failure on one event never aborts the batch: the orchestrator always
returns a verdict, and the pipeline only routes events into the accepted
or rejected lists and folds each verdict into the batch metrics.

Usage:
    from dateline.pipeline import ValidationPipeline

    pipeline = ValidationPipeline.from_settings()
    report = await pipeline.run(events, CalendarDay(month=10, day=8))
    await pipeline.close()
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel, Field

from dateline.config.settings import settings
from dateline.data_management.result_cache import ResultCache
from dateline.data_management.schemas import CalendarDay, CandidateEvent, ValidationVerdict
from dateline.llm.gemini_client import GeminiClient
from dateline.llm.research_oracle import ResearchOracleClient
from dateline.sources.encyclopedia_client import EncyclopediaClient
from dateline.sources.search_client import SearchClient
from dateline.validation.metrics import ValidationMetrics
from dateline.validation.orchestrator import TierOrchestrator, ValidationProfile


class ValidatedEvent(BaseModel):
    """An event paired with the verdict it received."""

    event: CandidateEvent
    verdict: ValidationVerdict


class BatchReport(BaseModel):
    """Outcome of one batch run."""

    day: CalendarDay
    accepted: list[ValidatedEvent] = Field(default_factory=list)
    rejected: list[ValidatedEvent] = Field(default_factory=list)
    metrics: ValidationMetrics = Field(default_factory=ValidationMetrics)

    @property
    def accepted_events(self) -> list[CandidateEvent]:
        return [item.event for item in self.accepted]


class ValidationPipeline:
    """Drives a batch of candidate events through the TierOrchestrator."""

    def __init__(
        self,
        orchestrator: TierOrchestrator,
        cache: Optional[ResultCache] = None,
        inter_event_delay: Optional[float] = None,
    ) -> None:
        """Initialize ValidationPipeline.

        Args:
            orchestrator: Configured orchestrator.
            cache: Cache shared by the orchestrator's clients, read for stats.
            inter_event_delay: Pause between events in seconds.
        """
        self.orchestrator = orchestrator
        self.cache = cache
        self.inter_event_delay = (
            settings.inter_event_delay if inter_event_delay is None else inter_event_delay
        )
        self._closers: list[Callable[[], Awaitable[None]]] = []
        self._logger = structlog.get_logger().bind(component="ValidationPipeline")

    @classmethod
    def from_settings(
        cls,
        profile: Optional[ValidationProfile] = None,
        cache: Optional[ResultCache] = None,
    ) -> "ValidationPipeline":
        """Build every backend client from settings around one shared cache.

        The excerpt judge is optional: without a Gemini key the excerpt
        checks are skipped.

        Raises:
            ValueError: If the oracle or search API key is missing.
        """
        cache = cache if cache is not None else ResultCache()
        encyclopedia = EncyclopediaClient(cache=cache)
        oracle = ResearchOracleClient(cache=cache)
        search = SearchClient(cache=cache)
        judge = GeminiClient(cache=cache) if settings.gemini_api_key else None

        orchestrator = TierOrchestrator(
            encyclopedia=encyclopedia,
            oracle=oracle,
            search=search,
            judge=judge,
            profile=profile or ValidationProfile.from_settings(),
        )
        pipeline = cls(orchestrator, cache=cache)
        pipeline._closers = [encyclopedia.close, oracle.close, search.close]
        return pipeline

    async def close(self) -> None:
        """Close HTTP clients created by ``from_settings``."""
        for close in self._closers:
            await close()

    async def run(
        self,
        events: list[CandidateEvent],
        day: CalendarDay,
        progress_callback: Optional[Callable[[CandidateEvent, ValidationVerdict], Awaitable[None]]] = None,
    ) -> BatchReport:
        """Validate ``events`` against ``day`` sequentially.

        Args:
            events: Candidate events (corrected years are written back).
            day: Calendar day under test.
            progress_callback: Optional async callback per finished event.

        Returns:
            BatchReport with accepted and rejected events and metrics.
        """
        report = BatchReport(day=day)
        self._logger.info("batch_started", day=str(day), events=len(events))

        for index, event in enumerate(events):
            if index > 0 and self.inter_event_delay > 0:
                await asyncio.sleep(self.inter_event_delay)

            verdict = await self.orchestrator.validate(event, day)
            report.metrics.record(verdict)

            item = ValidatedEvent(event=event, verdict=verdict)
            if verdict.accepted:
                report.accepted.append(item)
            else:
                report.rejected.append(item)

            if progress_callback is not None:
                await progress_callback(event, verdict)

        if self.cache is not None:
            report.metrics.record_cache(self.cache.stats())

        self._logger.info("batch_finished", day=str(day), **report.metrics.summary())
        return report
