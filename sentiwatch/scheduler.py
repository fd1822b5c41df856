"""
sentiwatch/scheduler.py
Latest-wins delayed work, for the dashboard's simulated processing time
and the typewriter reveal of narrative summaries.

Every submit() bumps a generation counter and cancels whatever was
pending. A task only commits its result if its generation is still the
current one when it finishes, so a slow, stale computation can never
overwrite state produced from newer input.

Single event loop, no threads. Work functions run synchronously inside
the task once the delay has elapsed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class LatestWinsScheduler:

    def __init__(self, delay: float = 0.0):
        self.delay       = delay
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> int:
        """Start a new generation, cancelling the pending task if any."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def submit(
        self,
        work:   Callable[[], T],
        commit: Callable[[T], None],
        delay:  Optional[float] = None,
    ) -> asyncio.Task:
        """
        Schedule work() after `delay` seconds; pass its result to commit()
        unless a newer submit() or begin() happened in the meantime.
        Must be called from inside a running event loop.
        """
        generation = self.begin()
        wait = self.delay if delay is None else delay
        self._task = asyncio.get_running_loop().create_task(
            self._run(generation, work, commit, wait)
        )
        return self._task

    async def _run(self, generation: int, work, commit, wait: float) -> bool:
        await asyncio.sleep(wait)
        if not self.is_current(generation):
            logger.debug(f"Discarding stale generation {generation}")
            return False
        result = work()
        # work() is synchronous, so nothing can interleave before commit
        commit(result)
        return True

    async def wait(self) -> Optional[bool]:
        """Await the pending task. None if nothing is pending or it was cancelled."""
        task = self._task
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            return None


async def reveal_text(
    text:      str,
    on_update: Callable[[str], None],
    scheduler: LatestWinsScheduler,
    char_delay: float = 0.03,
    sleep:     Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> bool:
    """
    Feed growing prefixes of `text` to on_update, one character per
    char_delay seconds. Stops as soon as another generation begins on
    the scheduler. Returns True if the full text was revealed.
    """
    generation = scheduler.begin()
    on_update('')
    for i in range(1, len(text) + 1):
        await sleep(char_delay)
        if not scheduler.is_current(generation):
            return False
        on_update(text[:i])
    return True
