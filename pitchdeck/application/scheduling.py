"""Cancellable scheduled-repeat task on the running event loop."""

import asyncio
from typing import Callable, Optional

from pitchdeck.infra.config.logging_config import get_logger

logger = get_logger(__name__)


class RepeatingTask:
    """
    Calls ``callback`` every ``interval`` seconds until stopped.

    The owner starts it on entering a state and stops it on every exit path.
    At most one underlying asyncio task is live per instance; ``start`` on a
    running instance is a no-op and ``restart`` re-arms the full interval.
    Must be started from inside a running event loop.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.name = name
        self._callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=self.name
        )

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def restart(self) -> None:
        self.stop()
        self.start()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self._callback()
            except Exception as e:
                logger.error("scheduler.callback_failed", task=self.name, error=str(e))
                raise
