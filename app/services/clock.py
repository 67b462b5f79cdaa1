from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


_SYSTEM_CLOCK = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency; tests swap it through ``dependency_overrides``."""

    return _SYSTEM_CLOCK
