"""Tests for the unified RetryPolicy.

Tests cover:
- Preset shapes (exponential, fixed, no_wait)
- Exception retries (recover, exhaust and re-raise)
- Result retries (retry on predicate, return last result when exhausted)
- Exceptions outside retry_on propagate immediately
"""

import pytest

from dateline.llm.retry import RetryPolicy


class Flaky:
    """Coroutine callable failing a fixed number of times before succeeding."""

    def __init__(self, failures: int, result: str = "ok", exc: type[Exception] = ConnectionError):
        self.failures = failures
        self.result = result
        self.exc = exc
        self.calls = 0

    async def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"failure {self.calls}")
        return self.result


# ── Presets ──────────────────────────────────────────────────────────────


class TestPresets:
    def test_exponential_preset(self) -> None:
        policy = RetryPolicy.exponential()
        assert policy.max_attempts == 5
        assert policy.backoff == "exponential"
        assert policy.base_delay == 1.0
        assert policy.jitter == pytest.approx(0.1)

    def test_fixed_preset(self) -> None:
        policy = RetryPolicy.fixed(max_attempts=3, delay=1.0)
        assert policy.max_attempts == 3
        assert policy.backoff == "fixed"
        assert policy.jitter == 0.0

    def test_no_wait_preset(self) -> None:
        policy = RetryPolicy.no_wait(4)
        assert policy.max_attempts == 4
        assert policy.base_delay == 0.0

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)


# ── Exception retries ────────────────────────────────────────────────────


class TestExceptionRetries:
    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self) -> None:
        fn = Flaky(failures=2)
        result = await RetryPolicy.no_wait(3).call(fn)
        assert result == "ok"
        assert fn.calls == 3

    @pytest.mark.asyncio
    async def test_reraises_last_exception_when_exhausted(self) -> None:
        fn = Flaky(failures=10)
        with pytest.raises(ConnectionError, match="failure 3"):
            await RetryPolicy.no_wait(3).call(fn)
        assert fn.calls == 3

    @pytest.mark.asyncio
    async def test_single_attempt_does_not_retry(self) -> None:
        fn = Flaky(failures=1)
        with pytest.raises(ConnectionError):
            await RetryPolicy.no_wait(1).call(fn)
        assert fn.calls == 1

    @pytest.mark.asyncio
    async def test_unlisted_exception_propagates_immediately(self) -> None:
        fn = Flaky(failures=5, exc=KeyError)
        policy = RetryPolicy(max_attempts=3, base_delay=0.0, retry_on=(ConnectionError,))
        with pytest.raises(KeyError):
            await policy.call(fn)
        assert fn.calls == 1

    @pytest.mark.asyncio
    async def test_passes_arguments_through(self) -> None:
        async def add(a, b, scale=1):
            return (a + b) * scale

        assert await RetryPolicy.no_wait(1).call(add, 2, 3, scale=10) == 50


# ── Result retries ───────────────────────────────────────────────────────


class TestResultRetries:
    @pytest.mark.asyncio
    async def test_retries_until_result_accepted(self) -> None:
        outputs = iter([[], [], ["hit"]])
        calls = 0

        async def search():
            nonlocal calls
            calls += 1
            return next(outputs)

        result = await RetryPolicy.no_wait(3).call(
            search, retry_if_result_fn=lambda r: not r
        )
        assert result == ["hit"]
        assert calls == 3

    @pytest.mark.asyncio
    async def test_returns_last_result_when_exhausted(self) -> None:
        calls = 0

        async def search():
            nonlocal calls
            calls += 1
            return []

        result = await RetryPolicy.no_wait(3).call(
            search, retry_if_result_fn=lambda r: not r
        )
        assert result == []
        assert calls == 3

    @pytest.mark.asyncio
    async def test_exception_on_final_attempt_still_raises(self) -> None:
        calls = 0

        async def search():
            nonlocal calls
            calls += 1
            if calls == 1:
                return []
            raise TimeoutError("slow")

        with pytest.raises(TimeoutError):
            await RetryPolicy.no_wait(2).call(search, retry_if_result_fn=lambda r: not r)

    @pytest.mark.asyncio
    async def test_results_only_does_not_retry_exceptions(self) -> None:
        flaky = Flaky(failures=1)
        policy = RetryPolicy.fixed(max_attempts=3, delay=0.0).results_only()

        assert policy.max_attempts == 3
        assert policy.retry_on == ()
        with pytest.raises(ConnectionError):
            await policy.call(flaky, retry_if_result_fn=lambda r: not r)
        assert flaky.calls == 1
