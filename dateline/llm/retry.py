"""Unified retry policy shared by every backend collaborator.

One RetryPolicy object is injected into each client instead of each call
site carrying its own loop. Two shapes are used:

- exponential: research oracle calls, base 1.0s doubled per attempt with
  0-10% jitter, up to 5 attempts
- fixed: search-tier calls, constant 1.0s delay, up to 3 attempts

Exception retries re-raise the last exception once attempts are exhausted.
Result retries (``retry_if_result``) return the last result instead, so a
caller can treat "still empty after N tries" as an ordinary outcome.
"""

from typing import Any, Awaitable, Callable, Literal, Optional

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
    wait_random,
)


class RetryPolicy:
    """
    Bounded retry configuration built on tenacity.

    Attributes:
        max_attempts: Total attempts including the first call
        base_delay: Initial (exponential) or constant (fixed) delay in seconds
        backoff: "exponential" or "fixed"
        jitter: Fraction of base_delay added as random jitter (0.0 disables)
        max_delay: Upper bound on a single exponential delay
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        backoff: Literal["exponential", "fixed"] = "fixed",
        jitter: float = 0.0,
        max_delay: float = 30.0,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff = backoff
        self.jitter = jitter
        self.max_delay = max_delay
        self.retry_on = retry_on

    @classmethod
    def exponential(cls, max_attempts: int = 5, base_delay: float = 1.0) -> "RetryPolicy":
        """Oracle-style policy: 1s, 2s, 4s, 8s ... with 10% jitter."""
        return cls(
            max_attempts=max_attempts,
            base_delay=base_delay,
            backoff="exponential",
            jitter=0.1,
        )

    @classmethod
    def fixed(cls, max_attempts: int = 3, delay: float = 1.0) -> "RetryPolicy":
        """Search-style policy: constant delay between attempts."""
        return cls(max_attempts=max_attempts, base_delay=delay, backoff="fixed")

    @classmethod
    def no_wait(cls, max_attempts: int = 1) -> "RetryPolicy":
        """Policy without delays, used by tests and for single-shot calls."""
        return cls(max_attempts=max_attempts, base_delay=0.0, backoff="fixed")

    def results_only(self) -> "RetryPolicy":
        """Copy of this policy that retries on unaccepted results but never on exceptions.

        Used where the wrapped call already retries its own transport
        failures, so attempts do not multiply.
        """
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            backoff=self.backoff,
            jitter=self.jitter,
            max_delay=self.max_delay,
            retry_on=(),
        )

    def _wait(self):
        if self.backoff == "exponential":
            wait = wait_exponential(
                multiplier=self.base_delay, min=self.base_delay, max=self.max_delay
            )
        else:
            wait = wait_fixed(self.base_delay)
        if self.jitter > 0 and self.base_delay > 0:
            wait = wait + wait_random(0, self.base_delay * self.jitter)
        return wait

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        cause = outcome.exception() if outcome is not None and outcome.failed else "unaccepted result"
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Retry {retry_state.attempt_number} for "
            f"{getattr(retry_state.fn, '__name__', 'call')} after {delay:.2f}s: {cause}"
        )

    async def call(
        self,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        retry_if_result_fn: Optional[Callable[[Any], bool]] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Await ``fn(*args, **kwargs)`` under this policy.

        Args:
            fn: Coroutine function to call
            retry_if_result_fn: Optional predicate; a True result triggers a retry
                and the last result is returned when attempts run out

        Returns:
            The first accepted result

        Raises:
            The last exception raised by ``fn`` after all attempts failed
        """
        retry = retry_if_exception_type(self.retry_on)
        if retry_if_result_fn is not None:
            retry = retry | retry_if_result(retry_if_result_fn)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait(),
            retry=retry,
            before_sleep=self._log_retry,
            reraise=True,
            retry_error_callback=_last_result_or_raise,
        )
        return await retrying(fn, *args, **kwargs)


def _last_result_or_raise(retry_state: RetryCallState) -> Any:
    """Return the final result of a result-based retry, re-raising failures."""
    outcome = retry_state.outcome
    if outcome.failed:
        logger.error(
            f"Max retries exceeded for "
            f"{getattr(retry_state.fn, '__name__', 'call')}: {outcome.exception()}"
        )
        raise outcome.exception()
    return outcome.result()
