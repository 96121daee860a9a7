"""Time source used by every suspension point in the engine.

Work delays, scheduler gates and the animation tick all go through a Clock,
so tests can substitute a virtual clock and never wait on the wall clock.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Abstract time source."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds."""
        ...

    @abstractmethod
    async def sleep(self, delay: float) -> None:
        """Suspend the calling coroutine for ``delay`` seconds."""
        ...


class AsyncioClock(Clock):
    """Clock backed by the event loop's monotonic time."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, delay: float) -> None:
        await asyncio.sleep(max(delay, 0.0))
