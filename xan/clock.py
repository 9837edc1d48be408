"""
Time Sources

Governance deadlines are compared against an injected clock instead of the
runtime's wall time. Values are whole seconds, like a block timestamp: coarse
and non-decreasing, but not guaranteed to advance between two calls.
"""

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of "now" for delay-window comparisons."""

    @abstractmethod
    def now(self) -> int:
        """Current time in whole seconds."""


class SystemClock(Clock):
    """Wall-clock time truncated to seconds."""

    def now(self) -> int:
        return int(time.time())

    def __repr__(self) -> str:
        return "<SystemClock>"


class ManualClock(Clock):
    """
    Deterministic clock driven by the caller.

    Usage::

        clock = ManualClock(1_700_000_000)
        clock.advance(GOVERNANCE_DELAY_DURATION_SECONDS)
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"Clock cannot start before 0 (got {start})")
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int):
        """Jump to *timestamp*; equal values are allowed, earlier ones are not."""
        if timestamp < self._now:
            raise ValueError(
                f"Time cannot move backwards ({timestamp} < {self._now})"
            )
        self._now = int(timestamp)

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"Cannot advance by a negative amount ({seconds})")
        self._now += int(seconds)
        return self._now

    def __repr__(self) -> str:
        return f"<ManualClock now={self._now}>"
