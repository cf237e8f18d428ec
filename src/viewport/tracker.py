"""
Viewport size tracking.

The browser reports the container size on mount, on window resize, and when
the video starts playing (its intrinsic size can differ from the placeholder).
Fixed chrome such as the capture button bar is subtracted from the height.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from models.shape import ViewportSize

SizeListener = Callable[[ViewportSize], None]


class ViewportTracker:
    """Owns the current drawable size and republishes it to subscribers."""

    def __init__(self, chrome_height: float = 0.0):
        self.chrome_height = chrome_height
        self._size = ViewportSize()
        self._listeners: List[SizeListener] = []

    @property
    def size(self) -> ViewportSize:
        return self._size

    @property
    def ready(self) -> bool:
        return self._size.ready

    def subscribe(self, listener: SizeListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mount(self, width: float, height: float) -> ViewportSize:
        return self._measure(width, height, "mount")

    def resize(self, width: float, height: float) -> ViewportSize:
        return self._measure(width, height, "resize")

    def source_playing(self, width: float, height: float) -> ViewportSize:
        return self._measure(width, height, "playing")

    def _measure(self, width: float, height: float, reason: str) -> ViewportSize:
        size = ViewportSize(
            width=max(0.0, float(width)),
            height=max(0.0, float(height) - self.chrome_height),
        )
        if size == self._size:
            return size
        self._size = size
        logging.debug(f"Viewport {reason}: {size.width}x{size.height}")
        for listener in list(self._listeners):
            listener(size)
        return size
