"""LLM clients, retry policy and call pacing."""

from dateline.llm.rate_limiter import CallPacer
from dateline.llm.retry import RetryPolicy

__all__ = ["CallPacer", "RetryPolicy"]
