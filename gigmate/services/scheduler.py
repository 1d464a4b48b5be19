"""
scheduler.py — Debounce for pipeline triggers.

Location fixes, mode toggles and platform edits tend to arrive in bursts
(a GPS fix landing right after the city loads, for instance). The
scheduler holds one pending timer; every schedule() call replaces it, so
a burst inside the window produces a single callback with the last
parameters.
"""

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

P = TypeVar("P")


class FetchScheduler(Generic[P]):
    def __init__(self, callback: Callable[[P], None], delay_ms: int = 300) -> None:
        self._callback = callback
        self.delay_ms = delay_ms
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, params: P) -> None:
        """Arm the timer with `params`, superseding any unfired one."""
        if self._handle is not None:
            logger.debug("Superseding pending fetch")
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_ms / 1000, self._fire, params)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, params: P) -> None:
        self._handle = None
        self._callback(params)
