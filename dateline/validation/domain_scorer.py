"""Domain trust scoring for search result sets.

Score = Sum over results of the best matching class weight:

- High-trust host: +2.0
- Historical archive host: +1.5
- Generically allowed host: +1.0
- Anything else: 0

Hosts are matched by containment in either direction against the static
lists in ``dateline.config.domain_trust``; ``www.`` is stripped first.
"""

from typing import Iterable, List, Optional
from urllib.parse import urlparse

from loguru import logger

from dateline.config.domain_trust import (
    ALLOWED_DOMAINS,
    ALLOWED_SCORE,
    HIGH_TRUST_DOMAINS,
    HIGH_TRUST_SCORE,
    HISTORICAL_DOMAINS,
    HISTORICAL_SCORE,
)
from dateline.data_management.schemas import DomainQualityScore, SearchResult


def host_of(url: str) -> str:
    """Lowercased hostname without a leading ``www.`` ("" when unparseable)."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def _matches(host: str, domains: Iterable[str]) -> bool:
    return bool(host) and any(host in d or d in host for d in domains)


class DomainScorer:
    """
    Classifies result hosts against the trust tables.

    Usage:
        scorer = DomainScorer()
        quality = scorer.score(results)
        if len(results) >= 5 and quality.score >= 3: ...

    Attributes:
        high_trust: High-trust host list
        historical: Historical archive host list
        allowed: Generically allowed host list
    """

    def __init__(
        self,
        high_trust: Optional[List[str]] = None,
        historical: Optional[List[str]] = None,
        allowed: Optional[List[str]] = None,
    ):
        self.high_trust = high_trust or HIGH_TRUST_DOMAINS
        self.historical = historical or HISTORICAL_DOMAINS
        self.allowed = allowed or ALLOWED_DOMAINS
        self.logger = logger.bind(component="DomainScorer")

    def classify(self, url: str) -> float:
        """Weight of one URL's host."""
        host = host_of(url)
        if _matches(host, self.high_trust):
            return HIGH_TRUST_SCORE
        if _matches(host, self.historical):
            return HISTORICAL_SCORE
        if _matches(host, self.allowed):
            return ALLOWED_SCORE
        return 0.0

    def score(self, results: List[SearchResult]) -> DomainQualityScore:
        """Aggregate weight and class counts for a result set."""
        total = 0.0
        high_trust = 0
        historical = 0

        for result in results:
            weight = self.classify(result.url)
            if weight == HIGH_TRUST_SCORE:
                high_trust += 1
            elif weight == HISTORICAL_SCORE:
                historical += 1
            total += weight

        quality = DomainQualityScore(
            score=total,
            high_trust_count=high_trust,
            historical_count=historical,
            total=len(results),
        )
        self.logger.debug(
            f"Domain quality {quality.score:.1f} "
            f"(high-trust={high_trust}, historical={historical}, n={len(results)})"
        )
        return quality
