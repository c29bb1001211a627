"""
Live clock shown under the form. One tick per second while subscribed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime

logger = logging.getLogger("mutanabi")

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_clock(moment: datetime) -> str:
    """en-US long date and time, e.g. 'October 17, 2026 7:04:05 AM'."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{_MONTHS[moment.month - 1]} {moment.day}, {moment.year} "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"
    )


class Clock:
    def __init__(
        self,
        period: float = 1.0,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.period = period
        self.now = now

    def read(self) -> str:
        return format_clock(self.now())

    async def _run(self, on_tick: Callable[[str], None]) -> None:
        while True:
            on_tick(self.read())
            await asyncio.sleep(self.period)

    @asynccontextmanager
    async def subscribe(self, on_tick: Callable[[str], None]) -> AsyncIterator[None]:
        task = asyncio.create_task(self._run(on_tick))
        logger.debug("Clock subscription started")
        try:
            yield
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.debug("Clock subscription released")
