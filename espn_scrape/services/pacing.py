import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Pacer:
    """
    Minimum-interval pacing between calls to a rate-sensitive resource.

    ``wait()`` suspends until at least ``min_interval`` seconds have passed since
    the previous ``wait()`` returned. The first call never waits. The clock and
    sleep function are injectable so the policy can be tested without real delays.
    """

    def __init__(
        self,
        min_interval: float,
        name: str = "pacer",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.min_interval = min_interval
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    async def wait(self) -> float:
        """Wait out the remaining interval. Returns the seconds slept."""
        delay = 0.0
        if self._last_call is not None and self.min_interval > 0:
            elapsed = self._clock() - self._last_call
            if elapsed < self.min_interval:
                delay = self.min_interval - elapsed
                await self._sleep(delay)
        self._last_call = self._clock()
        return delay

    def reset(self) -> None:
        self._last_call = None

    def __repr__(self) -> str:
        return f"Pacer(name={self.name!r}, min_interval={self.min_interval})"
