from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Response timing depends on this interface rather than calling real time
    directly, so scripted runs can drive it.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


def elapsed_ms(start_s: float, end_s: float) -> int:
    """Whole milliseconds between two clock readings, never negative."""

    return int(round(max(0.0, end_s - start_s) * 1000.0))
