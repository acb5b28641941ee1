"""Fake time provider for tests."""

from datetime import UTC, datetime, timedelta

from retcon.gateway.time.abc import Time


class FakeTime(Time):
    """Deterministic clock.

    `sleep()` returns immediately, advances the clock, and is recorded in
    `sleep_calls` for assertions.
    """

    def __init__(self, current_time: datetime | None = None) -> None:
        if current_time is None:
            current_time = datetime(2024, 1, 15, 14, 30, 0, tzinfo=UTC)
        self._current_time = current_time
        self._sleep_calls: list[float] = []

    def now(self) -> datetime:
        return self._current_time

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)
        self._current_time = self._current_time + timedelta(seconds=seconds)

    @property
    def sleep_calls(self) -> list[float]:
        return list(self._sleep_calls)
