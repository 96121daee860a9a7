"""Step scheduler: the suspension points of a simulated run.

Every edge crossing in a run waits on the scheduler. In automatic mode the
wait is a timed delay scaled by the speed factor; in step mode it blocks
until ``advance()`` is called. Each wait remembers the generation it was
created in, so a wait that resumes after ``reset()`` raises
StaleSessionError instead of letting stale work touch a new session.
"""

from __future__ import annotations

import asyncio
from collections import deque

from patternplay.core.clock import AsyncioClock, Clock
from patternplay.core.config import SPEED_FACTORS
from patternplay.core.state import RunMode
from patternplay.errors.exceptions import InvalidSpeedError, StaleSessionError


class StepScheduler:
    """Cooperative gate between traversal steps.

    Example:
        >>> scheduler = StepScheduler(mode=RunMode.STEP)
        >>> gen = scheduler.generation
        >>> task = asyncio.create_task(scheduler.gate(0.8, gen))
        >>> scheduler.advance()
        True
    """

    def __init__(
        self,
        clock: Clock | None = None,
        mode: RunMode = RunMode.AUTO,
        speed: float = 1.0,
    ) -> None:
        """Initialize scheduler.

        Args:
            clock: Time source for automatic-mode delays.
            mode: Initial scheduling mode.
            speed: Initial speed factor.
        """
        self._clock = clock or AsyncioClock()
        self._mode = mode
        self._speed = self._checked_speed(speed)
        self._paused = False
        self._resume_event = asyncio.Event()
        self._resume_event.set()
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._generation = 0

    @staticmethod
    def _checked_speed(speed: float) -> float:
        if speed not in SPEED_FACTORS:
            raise InvalidSpeedError(speed, SPEED_FACTORS)
        return float(speed)

    @property
    def mode(self) -> RunMode:
        return self._mode

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def generation(self) -> int:
        """Counter bumped by every reset; waits from older generations are stale."""
        return self._generation

    @property
    def pending_count(self) -> int:
        """Number of step-mode waits not yet released."""
        return sum(1 for fut in self._waiters if not fut.done())

    @property
    def is_waiting(self) -> bool:
        return self.pending_count > 0

    def set_speed(self, speed: float) -> None:
        """Change the speed factor for delays scheduled from now on.

        Raises:
            InvalidSpeedError: If speed is not a supported factor.
        """
        self._speed = self._checked_speed(speed)

    def set_mode(self, mode: RunMode) -> None:
        """Switch mode for gates entered from now on.

        Waits already parked keep the mode they were entered in; call
        ``reset()`` to discard them.
        """
        self._mode = mode

    def _check(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleSessionError(generation, self._generation)

    async def gate(self, base_delay: float, generation: int) -> None:
        """Suspend until the scheduler lets the caller proceed.

        Args:
            base_delay: Automatic-mode delay at speed 1.
            generation: Generation the caller belongs to.

        Raises:
            StaleSessionError: If the scheduler was reset before or during the wait.
        """
        self._check(generation)

        if self._mode == RunMode.STEP:
            fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self._waiters.append(fut)
            try:
                await fut
            finally:
                if fut in self._waiters:
                    self._waiters.remove(fut)
        else:
            await self._clock.sleep(base_delay / self._speed)
            self._check(generation)
            # Pause is only honoured at the boundary, never mid-delay
            while self._paused:
                await self._resume_event.wait()
                self._check(generation)

        self._check(generation)

    def advance(self) -> bool:
        """Release the oldest pending step-mode wait.

        Returns:
            True if a wait was released, False if nothing was waiting.
        """
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_result(None)
                return True
        return False

    def pause(self) -> None:
        self._paused = True
        self._resume_event.clear()

    def resume(self) -> None:
        self._paused = False
        self._resume_event.set()

    def reset(self) -> None:
        """Discard all pending waits and invalidate the current generation."""
        self._generation += 1
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_exception(StaleSessionError(self._generation - 1, self._generation))
        self.resume()
