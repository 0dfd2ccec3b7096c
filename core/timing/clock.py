"""Elapsed play-time arithmetic and instant sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import time

MS_PER_S = 1000

# Any zero-argument callable returning the current instant in epoch ms.
InstantSource = Callable[[], int]


def now_ms() -> int:
    """Return the current wall-clock instant in epoch milliseconds."""

    return int(time.time() * MS_PER_S)


def elapsed_seconds(now: int, start: int, paused_duration_ms: int) -> int:
    """Whole seconds of active play between ``start`` and ``now``.

    Time spent paused is subtracted. A backward clock jump can make the
    difference negative; the result is clamped to ``0`` in that case.
    """

    active_ms = now - start - paused_duration_ms
    if active_ms < 0:
        return 0
    return active_ms // MS_PER_S


def format_seconds(seconds: int) -> str:
    """Render ``seconds`` as ``m:ss``, e.g. ``125 -> "2:05"``."""

    minutes, rest = divmod(seconds, 60)
    return f"{minutes}:{rest:02d}"


@dataclass
class ManualClock:
    """Deterministic instant source driven by hand.

    Useful for replaying a session without real delays::

        clock = ManualClock()
        store = SessionStore(clock)
        clock.advance(5_000)
    """

    now: int = 0

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now

    def set(self, ms: int) -> int:
        self.now = ms
        return self.now


__all__ = [
    "InstantSource",
    "ManualClock",
    "MS_PER_S",
    "elapsed_seconds",
    "format_seconds",
    "now_ms",
]
