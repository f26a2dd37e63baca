"""Politeness controls: the fixed courtesy delay before each page request."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from core.pipeline import DelayStage


class CourtesyDelay(DelayStage):
    """
    Pause for a fixed interval before every page request.

    This is a per-call pause, not a rate limiter: nothing is remembered between
    calls, so concurrent scrapes each wait their own full interval. Cancelling
    the awaiting task interrupts the pause.
    """

    def __init__(
        self,
        delay_seconds: float,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
        clock_fn: Callable[[], float] | None = None,
    ) -> None:
        """Initialize delay policy with optional test-time clock hooks."""
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")

        self.delay_seconds = delay_seconds
        self._sleep = sleep_fn or asyncio.sleep
        self._clock = clock_fn or time.monotonic

    async def wait(self) -> float:
        """Sleep for the configured interval and return the seconds that elapsed."""
        started = self._clock()
        await self._sleep(self.delay_seconds)
        return self._clock() - started
