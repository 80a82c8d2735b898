"""Logical clock driving the reasoning cycle."""

from __future__ import annotations

from .task import Eternal, Tense, Time

__all__ = ["Clock"]


class Clock:
    """Discrete logical time, advanced once per reasoning cycle."""

    def __init__(self, start: int = 0) -> None:
        self._start = start
        self._now = start

    @property
    def now(self) -> int:
        return self._now

    def next(self) -> int:
        """Advance by one tick and return the new time."""
        self._now += 1
        return self._now

    def reset(self) -> None:
        self._now = self._start

    def stamp(self) -> Tense:
        """Tense marking an occurrence at the current time."""
        return Tense(self._now)

    def relative_occurrence(self, time: Time) -> int | None:
        """Ticks from now to an occurrence (negative for the past).

        Returns:
            The signed distance, or None for eternal sentences
        """
        if isinstance(time, Eternal):
            return None
        return time.offset - self._now
