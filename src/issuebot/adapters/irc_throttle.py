"""Outbound flood control for IRC lines."""

from __future__ import annotations

import asyncio
import time


class LinePacer:
    """Token bucket that allows a burst of ``burst`` lines, then ``rate`` lines per second.

    ``await pacer.wait()`` before each line sent.
    """

    def __init__(self, burst: int, rate: float | None = None) -> None:
        self._burst = burst
        self._rate = rate if rate is not None else float(burst)
        self._tokens = float(burst)
        self._stamp = time.monotonic()

    @property
    def available(self) -> float:
        self._top_up()
        return self._tokens

    def delay(self) -> float:
        """Seconds until the next line may go out."""
        self._top_up()
        if self._tokens >= 1:
            return 0.0
        return (1 - self._tokens) / self._rate

    async def wait(self) -> None:
        pause = self.delay()
        if pause > 0:
            await asyncio.sleep(pause)
            self._top_up()
        self._tokens = max(self._tokens - 1, 0.0)

    def _top_up(self) -> None:
        now = time.monotonic()
        self._tokens = min(float(self._burst), self._tokens + (now - self._stamp) * self._rate)
        self._stamp = now
