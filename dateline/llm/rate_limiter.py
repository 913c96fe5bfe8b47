"""Cooperative call pacing for rate-limited backends."""

import asyncio
import time
from typing import Optional

from loguru import logger


class CallPacer:
    """
    Enforces a minimum interval between successive calls to one backend.

    Execution is single-threaded and cooperative, so pacing is a scheduled
    resume: ``wait()`` sleeps for whatever remains of the interval since the
    previous call, then stamps the current time. An asyncio lock keeps the
    check-then-stamp step atomic if a caller does run validations concurrently.

    Attributes:
        interval: Minimum seconds between calls
        last_call: Monotonic timestamp of the previous call (None before the first)
    """

    def __init__(self, interval: float):
        """
        Initialize pacer.

        Args:
            interval: Minimum delay between calls in seconds (e.g., 0.3)
        """
        self.interval = max(0.0, interval)
        self.last_call: Optional[float] = None
        self._lock = asyncio.Lock()

        logger.debug(f"CallPacer initialized: interval={self.interval}s")

    async def wait(self) -> float:
        """
        Wait until the next call is allowed.

        Returns:
            Seconds actually slept
        """
        async with self._lock:
            slept = 0.0
            now = time.monotonic()
            if self.last_call is not None and self.interval > 0:
                remaining = self.interval - (now - self.last_call)
                if remaining > 0:
                    await asyncio.sleep(remaining)
                    slept = remaining
            self.last_call = time.monotonic()
            return slept
