from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

logger = logging.getLogger("profit_pulse.rate_limiter")


class RateLimiter:
    """
    Spaces outbound calls at least `min_interval_s` apart.

    Waiters queue on an asyncio.Lock, which wakes them in arrival order.
    """

    def __init__(
        self,
        min_interval_s: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_call: Optional[float] = None

    async def _wait_turn(self) -> None:
        if self._last_call is not None:
            wait_s = self.min_interval_s - (self._clock() - self._last_call)
            if wait_s > 0:
                logger.debug("rate limit | sleep_s=%.3f", wait_s)
                await self._sleep(wait_s)
        self._last_call = self._clock()

    async def acquire(self) -> None:
        async with self._lock:
            await self._wait_turn()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Take a turn and hold it until the wrapped call finishes."""
        async with self._lock:
            await self._wait_turn()
            yield
