"""Periodic residual recomputation driven by a clock."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import datetime
from types import TracebackType
from typing import Protocol, Self
from zoneinfo import ZoneInfo

from caffeine_tracker.domain.entries import DoseEntry
from caffeine_tracker.domain.residual import ResidualReading
from caffeine_tracker.services.decay import HALF_LIFE_HOURS, evaluate

logger = logging.getLogger(__name__)

ReadingCallback = Callable[[ResidualReading], Awaitable[None] | None]


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        """Return the current time."""


@dataclass
class SystemClock(Clock):
    """Wall clock in a fixed timezone."""

    timezone: str = "UTC"

    def now(self) -> datetime:
        """Return the current aware time."""
        return datetime.now(tz=ZoneInfo(self.timezone))


@dataclass(eq=False)
class ResidualTicker:
    """Recompute the residual on a fixed interval and notify a subscriber.

    The ticker owns a single asyncio task between ``start`` and ``stop``.
    Use it as an async context manager to guarantee the task is released.
    """

    clock: Clock
    callback: ReadingCallback
    entries: tuple[DoseEntry, ...] = ()
    interval_seconds: float = 1.0
    half_life_hours: float = HALF_LIFE_HOURS
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        """Return True while the periodic task is alive."""
        return self._task is not None and not self._task.done()

    def replace_entries(self, entries: Iterable[DoseEntry]) -> None:
        """Swap the entry snapshot used by subsequent ticks."""
        self.entries = tuple(entries)

    def tick(self) -> ResidualReading:
        """Evaluate the current snapshot once."""
        return evaluate(self.entries, self.clock.now(), self.half_life_hours)

    def start(self) -> None:
        """Start the periodic task if it is not already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the periodic task and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            try:
                reading = self.tick()
                result = self.callback(reading)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Residual tick failed")
            await asyncio.sleep(self.interval_seconds)
