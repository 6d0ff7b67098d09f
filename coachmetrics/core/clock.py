"""
Injectable "today" for services that work on calendar windows.

Services never read system time directly so tests can pin dates.
"""
from abc import ABC, abstractmethod
from datetime import date


class Clock(ABC):
    """Source of the current calendar date."""

    @abstractmethod
    def today(self) -> date:
        ...


class SystemClock(Clock):
    """Local calendar date of the host."""

    def today(self) -> date:
        return date.today()


class FixedClock(Clock):
    """Always returns the same date."""

    def __init__(self, fixed: date):
        self.fixed = fixed

    def today(self) -> date:
        return self.fixed
