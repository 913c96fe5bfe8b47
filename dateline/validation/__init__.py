"""Multi-tier validation of "event on this date" claims.

Primary exports:
- TierOrchestrator: Sequences tiers 0-4 and returns a ValidationVerdict
- ValidationProfile: Tier 3 strategy and snapshot scope switches
- YearCorrector: Year-only repair after an oracle NO
- DifferentialSearchValidator: Tier 3 (differential or trust-scored)
- ContentVerifier: Excerpt checks against top search results
- ValidationMetrics: Caller-owned batch tallies
"""

from dateline.validation.content_verifier import ContentVerifier
from dateline.validation.differential import DifferentialSearchValidator
from dateline.validation.domain_scorer import DomainScorer
from dateline.validation.metrics import ValidationMetrics
from dateline.validation.orchestrator import TierOrchestrator, ValidationProfile
from dateline.validation.snapshot_tiers import ArticleScanner, DigestScanner
from dateline.validation.year_corrector import YearCorrector

__all__ = [
    "ArticleScanner",
    "ContentVerifier",
    "DifferentialSearchValidator",
    "DigestScanner",
    "DomainScorer",
    "TierOrchestrator",
    "ValidationMetrics",
    "ValidationProfile",
    "YearCorrector",
]
