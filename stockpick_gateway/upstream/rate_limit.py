"""
Request spacing for the upstream market data provider.

Proxied calls are scheduled against a theoretical arrival time: up to `burst`
requests go out back-to-back, after which each request is delayed until its
slot at `rate` requests per second comes up.
"""

import asyncio
import time
from collections.abc import Callable


class UpstreamThrottle:
    """
    Paces outgoing upstream requests.

    Reserving a slot is synchronous, so concurrent callers on one event loop
    are ordered without a lock; each caller then sleeps off its own delay.
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate <= 0 or burst < 1:
            raise ValueError("rate must be positive and burst at least 1")
        self._rate = rate
        self._burst = burst
        self._interval = 1.0 / rate
        self._tolerance = self._interval * (burst - 1)
        self._clock = clock
        self._next_slot = 0.0

        self.requests = 0
        self.delayed = 0
        self.total_delay_s = 0.0

    def reserve(self) -> float:
        """
        Book the next request slot.

        Returns:
            Seconds the caller must wait before sending (0 within the burst)
        """
        now = self._clock()
        slot = max(self._next_slot, now)
        delay = max(0.0, slot - self._tolerance - now)
        self._next_slot = slot + self._interval

        self.requests += 1
        if delay > 0:
            self.delayed += 1
            self.total_delay_s += delay
        return delay

    async def wait(self) -> float:
        """Reserve a slot and sleep until it comes up."""
        delay = self.reserve()
        if delay > 0:
            await asyncio.sleep(delay)
        return delay

    @property
    def stats(self) -> dict[str, float | int]:
        return {
            "requests": self.requests,
            "delayed_requests": self.delayed,
            "total_delay_seconds": round(self.total_delay_s, 3),
            "rate_per_second": self._rate,
            "burst": self._burst,
        }
