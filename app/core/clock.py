# app/core/clock.py
from datetime import date, datetime, timedelta, timezone
from typing import Optional


class Clock:
    """Source of the current time. Services never read the system clock directly."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock frozen at a given instant (tests, backfills)."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs) -> None:
        self._instant = self._instant + timedelta(**kwargs)


_clock: Optional[Clock] = None


def get_clock() -> Clock:
    """Clock dependency."""
    global _clock
    if _clock is None:
        _clock = Clock()
    return _clock


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
