"""Schemas for the minimal backend fields the validators consume.

Only the fields the orchestrator reads are modelled; everything else in the
backend payloads is ignored.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """One neural/keyword search hit."""

    id: str
    url: str = ""
    title: str = ""
    text: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}


class OracleLabel(str, Enum):
    YES = "YES"
    NO = "NO"
    UNCLEAR = "UNCLEAR"


class OracleConfidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class OracleVerdict(BaseModel):
    """Decoded research-oracle verdict.

    Missing labels fall back to the most conservative value:
    verdict UNCLEAR, confidence LOW, no actual date, placeholder reason.
    ``actual_date`` is only kept for NO verdicts.
    """

    verdict: OracleLabel = OracleLabel.UNCLEAR
    confidence: OracleConfidence = OracleConfidence.LOW
    actual_date: Optional[str] = None
    reason: str = "No reason provided"

    model_config = {"frozen": True}


class ExcerptAnswer(str, Enum):
    """Strict one-word answer from the cheap excerpt judge."""

    YES = "YES"
    NO = "NO"
    UNCLEAR = "UNCLEAR"


class DomainQualityScore(BaseModel):
    """Trust score of a result set, derived on demand from the domain tables."""

    score: float = 0.0
    high_trust_count: int = 0
    historical_count: int = 0
    total: int = 0

    model_config = {"frozen": True}


class ContentCheck(BaseModel):
    """Outcome of asking the excerpt judge about the top results."""

    confirmed: int = Field(default=0, ge=0)
    checked: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    model_config = {"frozen": True}
