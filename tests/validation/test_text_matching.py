"""Tests for name extraction, date strings and keyword helpers."""

import pytest

from dateline.data_management.schemas import CalendarDay, CandidateEvent, EventKind
from dateline.validation.text_matching import (
    english_date_strings,
    extract_person_name,
    find_date_mention,
    keyword_query,
    keyword_terms,
    mentions_date,
    multilingual_date_strings,
    shift_day,
    surname,
)

OCT_8 = CalendarDay(month=10, day=8)


# ── Person names ─────────────────────────────────────────────────────────


class TestExtractPersonName:
    @pytest.mark.parametrize(
        "title, kind, expected",
        [
            ("Birth of Marie Curie", EventKind.PERSON_BIRTH, "Marie Curie"),
            ("Death of Niels Bohr", EventKind.PERSON_DEATH, "Niels Bohr"),
            ("Born: Ada Lovelace", EventKind.PERSON_BIRTH, "Ada Lovelace"),
            ("Died: Alan Turing", EventKind.PERSON_DEATH, "Alan Turing"),
            ("Carl Sagan's Birthday", EventKind.PERSON_BIRTH, "Carl Sagan"),
            ("Emmy Noether's birth", EventKind.PERSON_BIRTH, "Emmy Noether"),
            ("Birth of Max Born, German physicist and Nobel laureate", EventKind.PERSON_BIRTH, "Max Born"),
            ("Birth of Grace Hopper, pioneer of computing", EventKind.PERSON_BIRTH, "Grace Hopper"),
            ("Birth of Tycho Brahe, danish astronomer", EventKind.PERSON_BIRTH, "Tycho Brahe"),
            ("Death of Rosalind Franklin (1958)", EventKind.PERSON_DEATH, "Rosalind Franklin"),
        ],
    )
    def test_strips_decorations(self, title: str, kind: EventKind, expected: str) -> None:
        assert extract_person_name(title, kind) == expected

    def test_ordinary_event_has_no_name(self) -> None:
        assert extract_person_name("Pacemaker first implanted", EventKind.ORDINARY_EVENT) is None

    def test_surname(self) -> None:
        assert surname("Marie Curie") == "Curie"
        assert surname("Plato") is None
        assert surname("Wu Li") is None


# ── Date strings ─────────────────────────────────────────────────────────


class TestDateStrings:
    def test_english_orderings(self) -> None:
        assert english_date_strings(OCT_8) == [
            "October 8",
            "October 08",
            "8 October",
            "08 October",
            "october 8",
            "8 october",
        ]

    def test_two_digit_day_deduplicated(self) -> None:
        strings = english_date_strings(CalendarDay(month=10, day=18))
        assert strings.count("October 18") == 1
        assert len(strings) == 4

    def test_multilingual(self) -> None:
        strings = multilingual_date_strings(OCT_8)
        for expected in ["October 8", "8 Oktober", "8 Octobre", "8 octubre", "8 Ottobre", "10月 8"]:
            assert expected in strings
        assert len(strings) == len(set(strings))


class TestFindDateMention:
    def test_finds_month_day(self) -> None:
        assert find_date_mention("Implanted on October 8, 1958 in Stockholm.", OCT_8) == "October 8"

    def test_finds_day_month_case_insensitive(self) -> None:
        assert mentions_date("on 8 OCTOBER 1958", OCT_8)

    def test_padded_day(self) -> None:
        assert mentions_date("Dated 08 October 1958", OCT_8)

    def test_word_boundaries(self) -> None:
        assert not mentions_date("It happened on October 18, 1958.", OCT_8)
        assert not mentions_date("It happened on 28 October 1958.", OCT_8)

    def test_empty_text(self) -> None:
        assert find_date_mention("", OCT_8) is None


# ── Keywords ─────────────────────────────────────────────────────────────


class TestKeywords:
    def test_search_terms_then_title_words(self) -> None:
        event = CandidateEvent(
            title="Pacemaker first implanted in Sweden",
            claimed_date=OCT_8,
            year=1958,
            search_terms=["Elmqvist", "pacemaker"],
        )
        assert keyword_terms(event) == ["Elmqvist", "pacemaker", "first", "implanted", "Sweden"]
        assert keyword_query(event, limit=3) == "Elmqvist pacemaker first"


# ── Shifted days ─────────────────────────────────────────────────────────


class TestShiftDay:
    def test_week_later(self) -> None:
        assert shift_day(OCT_8, 1958, 7) == CalendarDay(month=10, day=15)

    def test_crosses_year_end(self) -> None:
        assert shift_day(CalendarDay(month=12, day=28), 1958, 7) == CalendarDay(month=1, day=4)

    def test_leap_day_in_leap_year(self) -> None:
        assert shift_day(CalendarDay(month=2, day=29), 1960, 7) == CalendarDay(month=3, day=7)

    def test_leap_day_in_common_year(self) -> None:
        assert shift_day(CalendarDay(month=2, day=29), 1959, 7) == CalendarDay(month=3, day=7)

    def test_february_in_common_year(self) -> None:
        assert shift_day(CalendarDay(month=2, day=25), 1959, 7) == CalendarDay(month=3, day=4)

    def test_shift_past_last_supported_year(self) -> None:
        assert shift_day(CalendarDay(month=12, day=28), 9999, 7) == CalendarDay(month=1, day=4)
