"""Schema package for candidate events, tier outcomes and backend payloads.

Primary exports:
- CandidateEvent: The mutable record under validation
- TierResult: Immutable outcome of one tier attempt
- ValidationVerdict: Terminal orchestrator output with audit trail

Usage:
    from dateline.data_management.schemas import CandidateEvent, CalendarDay
    event = CandidateEvent(title="Pacemaker first implanted",
                           claimed_date=CalendarDay(month=10, day=8), year=1958)
"""

from dateline.data_management.schemas.backend_schema import (
    ContentCheck,
    DomainQualityScore,
    ExcerptAnswer,
    OracleConfidence,
    OracleLabel,
    OracleVerdict,
    SearchResult,
)
from dateline.data_management.schemas.event_schema import (
    CalendarDay,
    CandidateEvent,
    EventKind,
)
from dateline.data_management.schemas.verdict_schema import (
    TierOutcome,
    TierResult,
    ValidationVerdict,
    YearCorrection,
)

__all__ = [
    "CalendarDay",
    "CandidateEvent",
    "ContentCheck",
    "DomainQualityScore",
    "EventKind",
    "ExcerptAnswer",
    "OracleConfidence",
    "OracleLabel",
    "OracleVerdict",
    "SearchResult",
    "TierOutcome",
    "TierResult",
    "ValidationVerdict",
    "YearCorrection",
]
