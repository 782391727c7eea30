"""
Core Module - Clock.

============================================================
WHO READS THE TIME
============================================================
- Snapshot timestamps (calculated_at)
- Cache freshness and stale-score sweeps
- "Active in the last N months" checks in calculators

All of them take a ClockProtocol so tests can pin and move
time with MockClock. Everything is UTC; timestamps read from
platforms or SQLite go through ensure_utc().

============================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional
import threading


class ClockProtocol(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""

    def is_older_than(self, moment: datetime, age: timedelta) -> bool:
        return self.now() - ensure_utc(moment) > age


class SystemClock(ClockProtocol):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class MockClock(ClockProtocol):
    """Frozen clock that only moves when advance() is called."""

    def __init__(self, initial_time: Optional[datetime] = None):
        self._time = ensure_utc(initial_time or datetime.now(timezone.utc))
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._time

    def advance(self, **delta) -> None:
        """Move forward by ``timedelta(**delta)``, e.g. advance(hours=25)."""
        with self._lock:
            self._time += timedelta(**delta)


# ============================================================
# PROCESS-WIDE CLOCK
# ============================================================

_clock: Optional[ClockProtocol] = None
_clock_lock = threading.Lock()


def get_clock() -> ClockProtocol:
    global _clock
    with _clock_lock:
        if _clock is None:
            _clock = SystemClock()
        return _clock


def set_clock(clock: ClockProtocol) -> None:
    global _clock
    with _clock_lock:
        _clock = clock


def reset_clock() -> None:
    set_clock(SystemClock())


# ============================================================
# TIMESTAMPS
# ============================================================

def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns naive values)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp as returned by platform APIs.

    Accepts a trailing ``Z``. Returns None for empty or unparsable input.
    """
    if not value:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "get_clock",
    "set_clock",
    "reset_clock",
    "ensure_utc",
    "parse_timestamp",
]
