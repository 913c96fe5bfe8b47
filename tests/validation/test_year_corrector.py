"""Tests for proposed-date parsing and year-only correction."""

from unittest.mock import AsyncMock

import pytest

from dateline.data_management.schemas import CalendarDay, CandidateEvent
from dateline.validation.year_corrector import (
    ProposedDate,
    YearCorrector,
    parse_proposed_date,
)

OCT_8 = CalendarDay(month=10, day=8)


def _event() -> CandidateEvent:
    return CandidateEvent(
        title="First fiber-optic link demonstrated",
        claimed_date=OCT_8,
        year=1975,
        narrative_text="In 1975 engineers demonstrated ...",
    )


def _oracle(rewrite: str | Exception = "In 1976 engineers demonstrated ...") -> AsyncMock:
    oracle = AsyncMock()
    if isinstance(rewrite, Exception):
        oracle.rewrite_narrative = AsyncMock(side_effect=rewrite)
    else:
        oracle.rewrite_narrative = AsyncMock(return_value=rewrite)
    return oracle


# ── Parsing ──────────────────────────────────────────────────────────────


class TestParseProposedDate:
    @pytest.mark.parametrize(
        "text",
        [
            "October 8, 1976",
            "October 8 1976",
            "Oct. 8, 1976",
            "8 October 1976",
            "8th October, 1976",
            "1976-10-08",
            "The event actually happened on October 8, 1976 (per NASA).",
        ],
    )
    def test_layouts(self, text: str) -> None:
        assert parse_proposed_date(text) == ProposedDate(10, 8, 1976)

    @pytest.mark.parametrize("text", [None, "", "unknown", "sometime in 1976", "Smarch 8, 1976"])
    def test_unparseable(self, text) -> None:
        assert parse_proposed_date(text) is None


# ── Correction ───────────────────────────────────────────────────────────


class TestYearCorrector:
    @pytest.mark.asyncio
    async def test_same_day_new_year_applied(self) -> None:
        event = _event()
        oracle = _oracle()
        corrector = YearCorrector(oracle)

        correction = await corrector.correct(event, "October 8, 1976", reason="launch slipped")

        assert correction.corrected
        assert correction.old_year == 1975
        assert correction.new_year == 1976
        assert correction.narrative_rewritten
        assert event.year == 1976
        assert event.date == "1976-10-08"
        assert event.narrative_text == "In 1976 engineers demonstrated ..."
        oracle.rewrite_narrative.assert_awaited_once_with(event, 1975, 1976, "launch slipped")

    @pytest.mark.asyncio
    async def test_different_day_not_applied(self) -> None:
        event = _event()
        oracle = _oracle()

        correction = await YearCorrector(oracle).correct(event, "November 8, 1975")

        assert not correction.corrected
        assert correction.new_year is None
        assert event.year == 1975
        oracle.rewrite_narrative.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_year_not_a_correction(self) -> None:
        event = _event()
        correction = await YearCorrector(_oracle()).correct(event, "October 8, 1975")
        assert not correction.corrected
        assert event.year == 1975

    @pytest.mark.asyncio
    async def test_unparseable_not_applied(self) -> None:
        event = _event()
        correction = await YearCorrector(_oracle()).correct(event, None)
        assert not correction.corrected

    @pytest.mark.asyncio
    async def test_rewrite_failure_keeps_correction(self) -> None:
        event = _event()
        corrector = YearCorrector(_oracle(RuntimeError("oracle down")))

        correction = await corrector.correct(event, "1976-10-08")

        assert correction.corrected
        assert not correction.narrative_rewritten
        assert event.year == 1976
        assert event.narrative_text == "In 1975 engineers demonstrated ..."

    @pytest.mark.asyncio
    async def test_empty_rewrite_keeps_text(self) -> None:
        event = _event()
        correction = await YearCorrector(_oracle("")).correct(event, "October 8, 1976")
        assert correction.corrected
        assert not correction.narrative_rewritten
        assert event.narrative_text.startswith("In 1975")

    @pytest.mark.asyncio
    async def test_without_oracle(self) -> None:
        event = _event()
        correction = await YearCorrector().correct(event, "October 8, 1976")
        assert correction.corrected
        assert not correction.narrative_rewritten

    @pytest.mark.asyncio
    async def test_explicit_day_overrides_claimed(self) -> None:
        event = _event()
        correction = await YearCorrector().correct(
            event, "October 9, 1976", day=CalendarDay(month=10, day=9)
        )
        assert correction.corrected
        assert event.claimed_date == CalendarDay(month=10, day=9)
        assert event.date == "1976-10-09"
