"""Asyncio debouncing for actions triggered by rapid input changes."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional


class Debouncer:
    """Run ``action`` once input has been quiet for ``interval`` seconds.

    Each ``trigger`` cancels the pending run and restarts the wait.
    """

    def __init__(self, interval: float, action: Callable[[], Awaitable[None]]) -> None:
        self.interval = interval
        self._action = action
        self._task: Optional[asyncio.Task[None]] = None

    def trigger(self) -> None:
        """Must be called from within a running event loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the pending run, if any, to finish."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _run(self) -> None:
        await asyncio.sleep(self.interval)
        await self._action()
