"""Tier and verdict schemas for the validation orchestrator.

TierResult is the immutable outcome of one tier attempt. Its evidence
payload (e.g. the Tier 3 result set) is carried forward to the next tier so
nothing is fetched twice.

ValidationVerdict is the terminal output for one event: accepted or not,
which tier path produced the decision, a stable reason code, an optional
year correction, and the full tier trail for audit.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class TierOutcome(str, Enum):
    """Outcome of a single tier.

    PASS: Tier confirmed the claim; the orchestrator accepts.
    FAIL: Tier produced a negative signal. Definitive for Tier 1 date
          mismatches, Tier 2 NO verdicts and the last tier run.
    INCONCLUSIVE: Tier could not decide (including backend errors);
          the orchestrator escalates.
    """

    PASS = "pass"
    FAIL = "fail"
    INCONCLUSIVE = "inconclusive"


class TierResult(BaseModel):
    """Immutable outcome of one tier attempt."""

    tier: str = Field(..., description="Tier label, e.g. 'tier0'")
    outcome: TierOutcome
    reason_code: str = Field(..., description="Machine-readable cause, e.g. 'wiki-date-mismatch'")
    evidence: Optional[Any] = Field(
        default=None,
        description="Opaque payload carried to the next tier (search results, verdicts)",
    )

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def passed(self) -> bool:
        return self.outcome == TierOutcome.PASS

    @property
    def failed(self) -> bool:
        return self.outcome == TierOutcome.FAIL


class YearCorrection(BaseModel):
    """Result of the year auto-correction sub-protocol."""

    corrected: bool
    old_year: int
    new_year: Optional[int] = None
    narrative_rewritten: bool = False

    model_config = {"frozen": True}


class ValidationVerdict(BaseModel):
    """Final orchestrator output for one event.

    ``correction`` is present only when a year rewrite actually happened.
    """

    accepted: bool
    method: str = Field(..., description="Tier path that produced the decision")
    reason_code: str
    correction: Optional[YearCorrection] = None
    trail: list[TierResult] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def correction_only_when_applied(self) -> "ValidationVerdict":
        if self.correction is not None and not self.correction.corrected:
            raise ValueError("correction may only be attached when a year was rewritten")
        return self

    @classmethod
    def accept(
        cls,
        method: str,
        reason_code: str,
        trail: list[TierResult],
        correction: Optional[YearCorrection] = None,
    ) -> "ValidationVerdict":
        return cls(
            accepted=True,
            method=method,
            reason_code=reason_code,
            correction=correction,
            trail=list(trail),
        )

    @classmethod
    def reject(cls, method: str, reason_code: str, trail: list[TierResult]) -> "ValidationVerdict":
        return cls(accepted=False, method=method, reason_code=reason_code, trail=list(trail))
