"""Year auto-correction after an oracle NO verdict.

The oracle is only trusted to fix the year. A proposed date is applied
when its month and day equal the claimed day exactly; anything else leaves
the event untouched, so a NO never relocates an event to a different day.

A correction also pins ``claimed_date`` to the day under test, so the
derived ``date`` names the day the oracle confirmed.

Accepted layouts for the proposed date:
    "October 8, 1976" / "October 8 1976"
    "8 October, 1976" / "8 October 1976"
    "1976-10-08"
"""

import re
from typing import NamedTuple, Optional

import structlog

from dateline.config.domain_trust import MONTH_NAMES
from dateline.data_management.schemas import CalendarDay, CandidateEvent, YearCorrection
from dateline.llm.research_oracle import ResearchOracleClient

_MONTH_DAY_YEAR = re.compile(r"([A-Za-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})")
_DAY_MONTH_YEAR = re.compile(r"(\d{1,2})(?:st|nd|rd|th)?\s+([A-Za-z]+)\.?,?\s+(\d{4})")
_ISO_DATE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")

_MONTH_LOOKUP = {name.lower(): index for index, name in enumerate(MONTH_NAMES, start=1)}
_MONTH_LOOKUP.update({name.lower()[:3]: index for index, name in enumerate(MONTH_NAMES, start=1)})


class ProposedDate(NamedTuple):
    month: int
    day: int
    year: int


def _month_number(text: str) -> Optional[int]:
    return _MONTH_LOOKUP.get(text.lower())


def parse_proposed_date(text: Optional[str]) -> Optional[ProposedDate]:
    """
    Parse an oracle ACTUAL_DATE value.

    Returns:
        ProposedDate, or None when no layout matches
    """
    if not text:
        return None

    match = _MONTH_DAY_YEAR.search(text)
    if match:
        month = _month_number(match.group(1))
        if month:
            return ProposedDate(month, int(match.group(2)), int(match.group(3)))

    match = _DAY_MONTH_YEAR.search(text)
    if match:
        month = _month_number(match.group(2))
        if month:
            return ProposedDate(month, int(match.group(1)), int(match.group(3)))

    match = _ISO_DATE.search(text)
    if match:
        month = int(match.group(2))
        if 1 <= month <= 12:
            return ProposedDate(month, int(match.group(3)), int(match.group(1)))

    return None


class YearCorrector:
    """Applies year-only corrections proposed by the research oracle.

    On success the event's ``year`` is rewritten (``date`` follows) and the
    narrative is regenerated for the new year. Regeneration is best effort:
    if it fails the correction still stands with the original text.
    """

    def __init__(self, oracle: Optional[ResearchOracleClient] = None) -> None:
        self.oracle = oracle
        self._logger = structlog.get_logger().bind(component="YearCorrector")

    async def correct(
        self,
        event: CandidateEvent,
        proposed_date_text: Optional[str],
        reason: str = "",
        day: Optional[CalendarDay] = None,
    ) -> YearCorrection:
        """
        Try to repair ``event.year`` from the oracle's proposed date.

        Args:
            event: Event under validation (mutated on success)
            proposed_date_text: Raw ACTUAL_DATE value
            reason: Oracle rationale, passed to the narrative rewrite
            day: Day under test (defaults to the event's claimed day)

        Returns:
            YearCorrection with ``corrected`` False when nothing changed
        """
        old_year = event.year
        proposed = parse_proposed_date(proposed_date_text)

        if proposed is None:
            self._logger.info("unparseable_proposed_date", value=proposed_date_text)
            return YearCorrection(corrected=False, old_year=old_year)

        claimed = day or event.claimed_date
        if (proposed.month, proposed.day) != (claimed.month, claimed.day):
            self._logger.info(
                "proposed_day_differs",
                claimed=str(claimed),
                proposed=f"{proposed.month:02d}-{proposed.day:02d}",
            )
            return YearCorrection(corrected=False, old_year=old_year)

        if proposed.year == old_year:
            self._logger.info("proposed_year_unchanged", year=old_year)
            return YearCorrection(corrected=False, old_year=old_year)

        event.year = proposed.year
        event.claimed_date = claimed
        self._logger.info(
            "year_corrected",
            title=event.title,
            old_year=old_year,
            new_year=proposed.year,
        )

        rewritten = await self._rewrite_narrative(event, old_year, proposed.year, reason)
        return YearCorrection(
            corrected=True,
            old_year=old_year,
            new_year=proposed.year,
            narrative_rewritten=rewritten,
        )

    async def _rewrite_narrative(
        self,
        event: CandidateEvent,
        old_year: int,
        new_year: int,
        reason: str,
    ) -> bool:
        if self.oracle is None:
            return False
        try:
            text = await self.oracle.rewrite_narrative(event, old_year, new_year, reason)
        except Exception as e:
            self._logger.warning("narrative_rewrite_failed", error=str(e))
            return False
        if not text:
            return False
        event.narrative_text = text
        return True
