"""Production time provider."""

import time
from datetime import UTC, datetime

from retcon.gateway.time.abc import Time


class RealTime(Time):
    """Time provider backed by the system clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
