"""Validation quality metrics, accumulated by the caller from verdicts.

Nothing here is global: a ValidationMetrics instance is owned by whoever
runs a batch, fed each returned verdict, and finally given the cache stats.
"""

from collections import Counter
from typing import Any

from pydantic import BaseModel, Field

from dateline.data_management.schemas import ValidationVerdict


class ValidationMetrics(BaseModel):
    """Per-batch tallies.

    Attributes:
        events_total: Verdicts recorded
        accepted: Accepted verdicts
        rejected: Rejected verdicts
        year_corrections: Accepted via year correction
        narratives_rewritten: Corrections whose narrative was regenerated
        accepted_by_method: Accepts keyed by method (tier0 ... tier4)
        drop_reasons: Rejects keyed by reason code
        tier_outcomes: {tier: {pass|fail|inconclusive: count}} over every trail entry
        error_reasons: ``*-error`` tier results keyed by reason code
        cache: Per-kind cache hits/misses (misses equal external calls issued)
    """

    events_total: int = 0
    accepted: int = 0
    rejected: int = 0
    year_corrections: int = 0
    narratives_rewritten: int = 0
    accepted_by_method: dict[str, int] = Field(default_factory=dict)
    drop_reasons: dict[str, int] = Field(default_factory=dict)
    tier_outcomes: dict[str, dict[str, int]] = Field(default_factory=dict)
    error_reasons: dict[str, int] = Field(default_factory=dict)
    cache: dict[str, dict[str, int]] = Field(default_factory=dict)

    def record(self, verdict: ValidationVerdict) -> None:
        """Fold one verdict into the tallies."""
        self.events_total += 1
        if verdict.accepted:
            self.accepted += 1
            _bump(self.accepted_by_method, verdict.method)
        else:
            self.rejected += 1
            _bump(self.drop_reasons, verdict.reason_code)

        if verdict.correction is not None:
            self.year_corrections += 1
            if verdict.correction.narrative_rewritten:
                self.narratives_rewritten += 1

        for result in verdict.trail:
            outcomes = self.tier_outcomes.setdefault(result.tier, {})
            _bump(outcomes, result.outcome.value)
            if result.reason_code.endswith("-error"):
                _bump(self.error_reasons, result.reason_code)

    def record_cache(self, stats: dict[str, dict[str, int]]) -> None:
        """Replace the cache snapshot with ``ResultCache.stats()``."""
        self.cache = {kind: dict(counts) for kind, counts in stats.items()}

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.events_total if self.events_total else 0.0

    @property
    def cache_hits(self) -> int:
        return sum(c.get("hits", 0) for c in self.cache.values())

    @property
    def external_calls(self) -> int:
        return sum(c.get("misses", 0) for c in self.cache.values())

    def top_drop_reasons(self, limit: int = 5) -> list[tuple[str, int]]:
        return Counter(self.drop_reasons).most_common(limit)

    def summary(self) -> dict[str, Any]:
        """Flat dict for logs and reports."""
        return {
            "events_total": self.events_total,
            "accepted": self.accepted,
            "rejected": self.rejected,
            "acceptance_rate": round(self.acceptance_rate, 3),
            "year_corrections": self.year_corrections,
            "accepted_by_method": dict(self.accepted_by_method),
            "drop_reasons": dict(self.drop_reasons),
            "errors": dict(self.error_reasons),
            "cache_hits": self.cache_hits,
            "external_calls": self.external_calls,
        }


def _bump(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1
