"""Candidate event schema: the mutable record under validation.

A CandidateEvent is created by the seeding collaborator, selectively mutated
during validation (``year`` and ``narrative_text`` after a year correction)
and then either dropped or handed on for polishing.

The claimed calendar day never changes during a validation run; only the
year may be rewritten. ``date`` is derived from both, so it always reflects
the current year.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from dateline.config.domain_trust import MONTH_NAMES

_DAYS_IN_MONTH = [31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


class EventKind(str, Enum):
    """What the claim describes.

    Person kinds switch the snapshot tiers to name matching, since a birth
    or death is listed by name rather than by a descriptive title.
    """

    ORDINARY_EVENT = "event"
    PERSON_BIRTH = "birthday"
    PERSON_DEATH = "death"

    @property
    def is_person(self) -> bool:
        return self in (EventKind.PERSON_BIRTH, EventKind.PERSON_DEATH)


class CalendarDay(BaseModel):
    """A year-independent calendar day (month 1-12, day 1-31)."""

    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_day_in_month(self) -> "CalendarDay":
        if self.day > _DAYS_IN_MONTH[self.month - 1]:
            raise ValueError(f"day {self.day} out of range for month {self.month}")
        return self

    @classmethod
    def parse(cls, text: str) -> "CalendarDay":
        """Parse ``MM-DD`` (as used on the command line)."""
        month, _, day = text.strip().partition("-")
        return cls(month=int(month), day=int(day))

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    def __str__(self) -> str:
        return f"{self.month_name} {self.day}"


class CandidateEvent(BaseModel):
    """Historical or scientific claim tied to a calendar day.

    Attributes:
        title: Human-readable claim label
        claimed_date: Calendar day under test (a year correction pins it to
            the day the oracle confirmed)
        year: Claimed year (rewritten by YearCorrector)
        external_id: Stable knowledge-base identifier (e.g. Wikidata QID)
        kind: Ordinary event, birth or death
        narrative_text: Free-text justification (rewritten after correction)
        source_links: Supporting URLs, order matters for top-N selection
        search_terms: Keywords used by search tiers, deduplicated in order
    """

    title: str = Field(..., min_length=1)
    claimed_date: CalendarDay
    year: int
    external_id: Optional[str] = Field(default=None)
    kind: EventKind = Field(default=EventKind.ORDINARY_EVENT)
    narrative_text: str = Field(default="")
    source_links: list[str] = Field(default_factory=list)
    search_terms: list[str] = Field(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("external_id")
    @classmethod
    def blank_id_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value or value.lower() == "null":
            return None
        return value

    @field_validator("search_terms")
    @classmethod
    def dedupe_terms(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        terms: list[str] = []
        for term in value:
            term = term.strip()
            key = term.lower()
            if term and key not in seen:
                seen.add(key)
                terms.append(term)
        return terms

    @property
    def date(self) -> str:
        """ISO date string derived from ``year`` and ``claimed_date``."""
        return f"{self.year:04d}-{self.claimed_date.month:02d}-{self.claimed_date.day:02d}"

    @classmethod
    def from_seed(cls, record: dict) -> "CandidateEvent":
        """Build from a seeding record (``date``/``type``/``qid``/``context``/``sources``/``keywords``)."""
        date_text = record.get("date", "")
        parts = date_text.split("-")
        if len(parts) == 3:
            year, month, day = (int(p) for p in parts)
        elif len(parts) == 2:
            month, day = (int(p) for p in parts)
            year = int(record["year"])
        else:
            raise ValueError(f"unrecognized date: {date_text!r}")

        return cls(
            title=record.get("title", ""),
            claimed_date=CalendarDay(month=month, day=day),
            year=int(record.get("year", year)),
            external_id=record.get("qid") or record.get("external_id"),
            kind=EventKind(record.get("type", EventKind.ORDINARY_EVENT.value)),
            narrative_text=record.get("context", "") or record.get("narrative_text", ""),
            source_links=list(record.get("sources", []) or record.get("source_links", [])),
            search_terms=list(record.get("keywords", []) or record.get("search_terms", [])),
        )
