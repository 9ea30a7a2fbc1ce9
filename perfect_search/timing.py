"""Elapsed compute-time tracking across sessions."""

import time
from typing import Callable


class ElapsedClock:
    """
    Accumulates compute time on top of time restored from a checkpoint.

    Each update() adds the time since the previous mark, so the total only
    ever grows, even across process restarts.
    """

    def __init__(self, elapsed: float = 0.0, timer: Callable[[], float] = time.monotonic):
        self._elapsed = elapsed
        self._timer = timer
        self._mark = None

    def start(self) -> None:
        """Begin timing from now."""
        self._mark = self._timer()

    def update(self) -> float:
        """Add time since the last mark and return the new total."""
        if self._mark is not None:
            now = self._timer()
            self._elapsed += max(0.0, now - self._mark)
            self._mark = now
        return self._elapsed

    @property
    def elapsed(self) -> float:
        return self._elapsed


def format_elapsed(seconds: float) -> str:
    """
    Format seconds as total seconds plus h:mm:ss.sss.

    Example:
        >>> format_elapsed(3725.5)
        '3725.500 seconds (1:02:05.500)'
    """
    hours = int(seconds // 3600)
    minutes = int(seconds % 3600) // 60
    secs = seconds % 60.0
    return f"{seconds:.3f} seconds ({hours}:{minutes:02d}:{secs:06.3f})"
