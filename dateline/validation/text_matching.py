"""Text matching helpers shared by the snapshot and search tiers.

Covers person-name extraction from event titles, date-string variants for
a calendar day (English orderings for article scans, multilingual forms
for inline search filters) and keyword query construction.
"""

import re
from datetime import date, timedelta
from typing import Optional

from dateline.config.domain_trust import MONTH_TRANSLATIONS
from dateline.data_management.schemas import CalendarDay, CandidateEvent, EventKind

# Applied in order; each strips one decoration from a birth/death title
_NAME_DECORATIONS = [
    re.compile(r"^Birth of ", re.IGNORECASE),
    re.compile(r"^Death of ", re.IGNORECASE),
    re.compile(r"^Born: ", re.IGNORECASE),
    re.compile(r"^Died: ", re.IGNORECASE),
    re.compile(r"'s Birthday$", re.IGNORECASE),
    re.compile(r"'s birth$", re.IGNORECASE),
    re.compile(r", pioneer.*", re.IGNORECASE),
    re.compile(r", (English|German|French|American)\b.*", re.IGNORECASE),
    re.compile(r", [a-z]+ (mathematician|astronomer|physicist|scientist|chemist|biologist).*", re.IGNORECASE),
    re.compile(r"\s*\(\d{4}\)"),
]

_TITLE_WORD = re.compile(r"[A-Za-z0-9][\w'-]*")

MIN_KEYWORD_LENGTH = 4
MAX_QUERY_KEYWORDS = 5


def extract_person_name(title: str, kind: EventKind) -> Optional[str]:
    """
    Strip birth/death decorations from a title to get the person's name.

    Returns None for ordinary events.

    Example:
        >>> extract_person_name("Birth of Marie Curie", EventKind.PERSON_BIRTH)
        'Marie Curie'
    """
    if not kind.is_person:
        return None
    name = title
    for pattern in _NAME_DECORATIONS:
        name = pattern.sub("", name)
    name = name.strip()
    return name or None


def surname(name: str) -> Optional[str]:
    """Last token of a name, when long enough to be distinctive."""
    parts = name.split()
    if len(parts) < 2:
        return None
    last = parts[-1].strip(".,")
    return last if len(last) >= MIN_KEYWORD_LENGTH else None


def english_date_strings(day: CalendarDay) -> list[str]:
    """Six orderings: "Month D", "Month 0D", "D Month", "0D Month" and lowercase forms."""
    month = day.month_name
    padded = f"{day.day:02d}"
    variants = [
        f"{month} {day.day}",
        f"{month} {padded}",
        f"{day.day} {month}",
        f"{padded} {month}",
        f"{month.lower()} {day.day}",
        f"{day.day} {month.lower()}",
    ]
    return list(dict.fromkeys(variants))


def multilingual_date_strings(day: CalendarDay) -> list[str]:
    """Date strings in every configured language, deduplicated in order."""
    padded = f"{day.day:02d}"
    variants: list[str] = []
    for month in MONTH_TRANSLATIONS.get(day.month_name, [day.month_name]):
        variants.extend([
            f"{month} {day.day}",
            f"{month} {padded}",
            f"{day.day} {month}",
            f"{padded} {month}",
            f"{month.lower()} {day.day}",
            f"{day.day} {month.lower()}",
        ])
    return list(dict.fromkeys(variants))


def _date_regex(variant: str) -> re.Pattern:
    body = r"\s+".join(re.escape(part) for part in variant.split())
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def find_date_mention(text: str, day: CalendarDay) -> Optional[str]:
    """
    First English date ordering for ``day`` found in ``text``.

    Matching is case-insensitive with word boundaries, so "October 8"
    does not match inside "October 18".
    """
    if not text:
        return None
    for variant in english_date_strings(day):
        if _date_regex(variant).search(text):
            return variant
    return None


def mentions_date(text: str, day: CalendarDay) -> bool:
    return find_date_mention(text, day) is not None


def keyword_terms(event: CandidateEvent, limit: int = MAX_QUERY_KEYWORDS) -> list[str]:
    """Search terms followed by distinctive title words, deduplicated."""
    words = [
        w for w in _TITLE_WORD.findall(event.title)
        if len(w) >= MIN_KEYWORD_LENGTH
    ]
    seen: set[str] = set()
    terms: list[str] = []
    for term in [*event.search_terms, *words]:
        key = term.lower()
        if key not in seen:
            seen.add(key)
            terms.append(term)
    return terms[:limit]


def keyword_query(event: CandidateEvent, limit: int = MAX_QUERY_KEYWORDS) -> str:
    return " ".join(keyword_terms(event, limit))


def shift_day(day: CalendarDay, year: int, days: int) -> CalendarDay:
    """
    Calendar day ``days`` after ``day`` in ``year``.

    February 29 in a non-leap year, and any shift past the ends of the
    supported year range, are computed from a leap reference year.
    """
    try:
        anchor = date(year, day.month, day.day)
    except ValueError:
        anchor = date(2000, day.month, day.day)
    try:
        shifted = anchor + timedelta(days=days)
    except OverflowError:
        shifted = date(2000, day.month, day.day) + timedelta(days=days)
    return CalendarDay(month=shifted.month, day=shifted.day)
