"""Abstract time provider."""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract interface for reading the clock and sleeping."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...

    def epoch_millis(self) -> int:
        """Return the current time as integer milliseconds since the epoch."""
        return int(self.now().timestamp() * 1000)
