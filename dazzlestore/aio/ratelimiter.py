"""Fixed-window admission control for remote backends.

Each call to ``ask()`` waits until the current window has room, then
admits the caller. Windows are fixed, not sliding: a window opens at the
first admission after the previous one expired and lasts ``window``
seconds, during which at most ``capacity`` callers are admitted.

Concurrent callers serialize around the shared counter with an
asyncio.Lock. Waiters are not queued fairly; after a window rolls over
they all contend again.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from ..config import RateLimitConfig, ensure_valid


logger = logging.getLogger(__name__)


class RateLimiter:
    """Admit at most ``capacity`` requests per ``window`` seconds.

    Args:
        window: Window length in seconds
        capacity: Admissions per window
        clock: Monotonic time source, injectable for tests
        sleep: Coroutine used to wait, injectable for tests

    Example:
        limiter = RateLimiter(window=1.0, capacity=5)
        async with limiter:
            await client.get(url)
    """

    def __init__(
        self,
        window: float = 1.0,
        capacity: int = 5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        ensure_valid(RateLimitConfig(window_seconds=window, capacity=capacity))
        self.window = window
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._window_start: Optional[float] = None
        self._used = 0
        self.total_admitted = 0
        self.total_waits = 0

    @classmethod
    def from_config(cls, config: RateLimitConfig, **kwargs) -> 'RateLimiter':
        """Create a limiter from a RateLimitConfig."""
        return cls(window=config.window_seconds, capacity=config.capacity, **kwargs)

    @property
    def used(self) -> int:
        """Admissions granted in the current window."""
        return self._used

    async def ask(self) -> None:
        """Wait for admission.

        The state machine, run under the lock:

        1. If no window is open or the open one has expired, open a new
           window at ``now`` and admit.
        2. Else if fewer than ``capacity`` admissions were granted in this
           window, count one more and admit.
        3. Else release the lock, sleep until the window expires and start
           over.
        """
        while True:
            async with self._lock:
                now = self._clock()
                if self._window_start is None or now - self._window_start >= self.window:
                    self._window_start = now
                    self._used = 1
                    self.total_admitted += 1
                    return
                if self._used < self.capacity:
                    self._used += 1
                    self.total_admitted += 1
                    return

                delay = self.window - (now - self._window_start)
                self.total_waits += 1

            logger.debug("Rate limit of %d per %.3fs reached; waiting %.3fs",
                         self.capacity, self.window, delay)
            await self._sleep(delay)

    async def __aenter__(self) -> 'RateLimiter':
        await self.ask()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    def __repr__(self) -> str:
        return f"RateLimiter(window={self.window}, capacity={self.capacity})"
