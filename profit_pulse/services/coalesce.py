from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class LatestWins(Generic[T]):
    """
    Run only the most recent of a burst of submissions.

    `submit` cancels whatever is still waiting and schedules the new callable
    to run after `delay_s`.
    """

    def __init__(
        self,
        delay_s: float = 0.05,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.delay_s = delay_s
        self._sleep = sleep
        self._pending: Optional[asyncio.Task[T]] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def _run(self, fn: Callable[[], T]) -> T:
        await self._sleep(self.delay_s)
        return fn()

    def submit(self, fn: Callable[[], T]) -> asyncio.Task[T]:
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._run(fn))
        return self._pending

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    async def wait(self) -> Optional[T]:
        """Await the latest submission, following replacements; None if nothing ran."""
        while True:
            task = self._pending
            if task is None:
                return None
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
                if self._pending is task:
                    return None
