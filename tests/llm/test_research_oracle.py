"""Tests for the research oracle client and verdict decoding.

Tests cover:
- Tolerant label decoding and the conservative fallback table
- Chat completion requests over a mocked transport
- Verdict caching by (title, month, day, year)
- Errors are retried and never cached
- Narrative rewrites
"""

import json

import httpx
import pytest

from dateline.config.settings import settings
from dateline.data_management.result_cache import ResultCache
from dateline.data_management.schemas import (
    CalendarDay,
    CandidateEvent,
    OracleConfidence,
    OracleLabel,
)
from dateline.llm.research_oracle import ResearchOracleClient, decode_verdict
from dateline.llm.retry import RetryPolicy


# ── Helpers ──────────────────────────────────────────────────────────────


def _event(year: int = 1958) -> CandidateEvent:
    return CandidateEvent(
        title="Pacemaker first implanted",
        claimed_date=CalendarDay(month=10, day=8),
        year=year,
        narrative_text="Rune Elmqvist's device was implanted in Arne Larsson.",
    )


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class Recorder:
    """MockTransport handler recording request bodies."""

    def __init__(self, responses: list[httpx.Response]):
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        return self.responses[index]


def _client(recorder: Recorder, attempts: int = 1, cache: ResultCache | None = None):
    return ResearchOracleClient(
        api_key="test-key",
        base_url="https://oracle.test",
        cache=cache if cache is not None else ResultCache(),
        retry_policy=RetryPolicy.no_wait(attempts),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recorder)),
    )


# ── Decoding ─────────────────────────────────────────────────────────────


class TestDecodeVerdict:
    def test_full_response(self) -> None:
        verdict = decode_verdict(
            "VERDICT: YES\nCONFIDENCE: HIGH\nACTUAL_DATE: N/A\nREASON: Confirmed by sources."
        )
        assert verdict.verdict == OracleLabel.YES
        assert verdict.confidence == OracleConfidence.HIGH
        assert verdict.actual_date is None
        assert verdict.reason == "Confirmed by sources."

    def test_markdown_and_reordered_labels(self) -> None:
        verdict = decode_verdict(
            "Here is my answer.\n\n"
            "**Reason:** The implant happened a year later.\n"
            "**Actual Date:** October 8, 1959\n"
            "**Confidence**: medium\n"
            "**VERDICT:** NO\n"
        )
        assert verdict.verdict == OracleLabel.NO
        assert verdict.confidence == OracleConfidence.MEDIUM
        assert verdict.actual_date == "October 8, 1959"
        assert verdict.reason == "The implant happened a year later."

    def test_numbered_list_labels(self) -> None:
        verdict = decode_verdict("1. VERDICT: NO\n2. CONFIDENCE: LOW\n3. ACTUAL_DATE: [1976-10-08]")
        assert verdict.verdict == OracleLabel.NO
        assert verdict.actual_date == "1976-10-08"

    def test_missing_labels_fall_back_conservatively(self) -> None:
        verdict = decode_verdict("I could not find anything about this event.")
        assert verdict.verdict == OracleLabel.UNCLEAR
        assert verdict.confidence == OracleConfidence.LOW
        assert verdict.actual_date is None
        assert verdict.reason == "No reason provided"

    def test_empty_content(self) -> None:
        verdict = decode_verdict("")
        assert verdict.verdict == OracleLabel.UNCLEAR
        assert verdict.confidence == OracleConfidence.LOW

    def test_unrecognized_verdict_token_is_unclear(self) -> None:
        verdict = decode_verdict("VERDICT: PROBABLY\nCONFIDENCE: HIGH")
        assert verdict.verdict == OracleLabel.UNCLEAR
        assert verdict.confidence == OracleConfidence.HIGH

    def test_actual_date_only_kept_for_no(self) -> None:
        verdict = decode_verdict("VERDICT: YES\nACTUAL_DATE: October 8, 1958")
        assert verdict.actual_date is None

    def test_placeholder_actual_date_dropped(self) -> None:
        verdict = decode_verdict("VERDICT: NO\nACTUAL_DATE: unknown")
        assert verdict.verdict == OracleLabel.NO
        assert verdict.actual_date is None

    def test_first_label_occurrence_wins(self) -> None:
        verdict = decode_verdict("VERDICT: NO\nVERDICT: YES")
        assert verdict.verdict == OracleLabel.NO


# ── Client ───────────────────────────────────────────────────────────────


class TestResearchOracleClient:
    def test_requires_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "perplexity_api_key", "")
        with pytest.raises(ValueError, match="PERPLEXITY_API_KEY"):
            ResearchOracleClient(api_key="")

    @pytest.mark.asyncio
    async def test_assess_date_sends_prompt_and_decodes(self) -> None:
        recorder = Recorder([
            httpx.Response(200, json=_completion("VERDICT: YES\nCONFIDENCE: HIGH\nREASON: ok"))
        ])
        client = _client(recorder)

        verdict = await client.assess_date(_event(), CalendarDay(month=10, day=8))

        assert verdict.verdict == OracleLabel.YES
        assert len(recorder.requests) == 1
        request = recorder.requests[0]
        assert request.url.path == "/chat/completions"
        assert request.headers["authorization"] == "Bearer test-key"
        body = json.loads(request.content)
        user_prompt = body["messages"][1]["content"]
        assert "Pacemaker first implanted" in user_prompt
        assert "October 8, 1958" in user_prompt

    @pytest.mark.asyncio
    async def test_verdict_cached_per_year(self) -> None:
        recorder = Recorder([httpx.Response(200, json=_completion("VERDICT: YES"))])
        client = _client(recorder)
        day = CalendarDay(month=10, day=8)

        await client.assess_date(_event(1958), day)
        await client.assess_date(_event(1958), day)
        assert len(recorder.requests) == 1

        await client.assess_date(_event(1959), day)
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_transient_failures_retried(self) -> None:
        recorder = Recorder([
            httpx.Response(429, json={"error": "rate limited"}),
            httpx.Response(503, json={"error": "busy"}),
            httpx.Response(200, json=_completion("VERDICT: NO\nACTUAL_DATE: October 8, 1959")),
        ])
        client = _client(recorder, attempts=5)

        verdict = await client.assess_date(_event(), CalendarDay(month=10, day=8))

        assert verdict.verdict == OracleLabel.NO
        assert verdict.actual_date == "October 8, 1959"
        assert len(recorder.requests) == 3

    @pytest.mark.asyncio
    async def test_exhausted_errors_raise_and_are_not_cached(self) -> None:
        recorder = Recorder([httpx.Response(500, json={"error": "down"})])
        cache = ResultCache()
        client = _client(recorder, attempts=2, cache=cache)

        with pytest.raises(httpx.HTTPStatusError):
            await client.assess_date(_event(), CalendarDay(month=10, day=8))

        assert len(recorder.requests) == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_malformed_payload_raises_value_error(self) -> None:
        recorder = Recorder([httpx.Response(200, json={"unexpected": True})])
        client = _client(recorder)

        with pytest.raises(ValueError, match="Malformed"):
            await client.complete("prompt")

    @pytest.mark.asyncio
    async def test_rewrite_narrative_cached(self) -> None:
        recorder = Recorder([httpx.Response(200, json=_completion("  New narrative for 1959.  "))])
        client = _client(recorder)

        text = await client.rewrite_narrative(_event(), 1958, 1959, "off by one")
        again = await client.rewrite_narrative(_event(), 1958, 1959, "off by one")

        assert text == "New narrative for 1959."
        assert again == text
        assert len(recorder.requests) == 1
        prompt = json.loads(recorder.requests[0].content)["messages"][1]["content"]
        assert "INCORRECT YEAR: 1958" in prompt
        assert "CORRECT YEAR: 1959" in prompt

    @pytest.mark.asyncio
    async def test_close_releases_client(self) -> None:
        client = _client(Recorder([httpx.Response(200, json=_completion("VERDICT: YES"))]))
        await client.close()
        assert client._client is None
