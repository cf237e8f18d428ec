"""
Frame tick scheduling.

The inference loop asks for "run this on the next display frame" and may
cancel the request. Production uses the asyncio event loop at a fixed refresh
rate; tests step ticks by hand.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Dict, Optional, Protocol

TickCallback = Callable[[], None]


class FrameScheduler(Protocol):
    def call_on_next_frame(self, callback: TickCallback) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class AsyncioFrameScheduler:
    """Runs callbacks on the running asyncio loop every 1/refresh_hz seconds."""

    def __init__(self, refresh_hz: float = 60.0, loop: Optional[asyncio.AbstractEventLoop] = None):
        if refresh_hz <= 0:
            raise ValueError("refresh_hz must be positive")
        self.interval = 1.0 / refresh_hz
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_on_next_frame(self, callback: TickCallback) -> asyncio.TimerHandle:
        return self._get_loop().call_later(self.interval, callback)

    def cancel(self, handle: Optional[asyncio.TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()


class ManualScheduler:
    """Scheduler stepped explicitly; each run_pending() is one display frame."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._pending: Dict[int, TickCallback] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def call_on_next_frame(self, callback: TickCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._pending.pop(handle, None)

    def run_pending(self) -> int:
        """Run callbacks queued before this call; returns how many ran."""
        batch = list(self._pending.items())
        self._pending.clear()
        for _, callback in batch:
            callback()
        return len(batch)
