from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """UTC wall clock for message timestamps and last-seen writes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
