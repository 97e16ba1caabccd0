"""
Time utilities.

Provides UTC timestamps, a strictly increasing clock for ledger
records and duration formatting for status messages.
"""

import threading
import time
from datetime import UTC, datetime, timedelta


def get_timestamp_us() -> int:
    """
    Get current timestamp in microseconds.

    Returns:
        Current Unix timestamp in microseconds.
    """
    return time.time_ns() // 1000


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def start_of_day(moment: datetime) -> datetime:
    """Midnight (UTC) of the day containing `moment`."""
    return moment.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


class MonotonicClock:
    """
    Wall clock that never repeats or goes backwards.

    Two calls within the same microsecond (or across a clock step back)
    return values at least one microsecond apart, so records stamped
    with it sort in creation order.
    """

    __slots__ = ("_last", "_lock")

    def __init__(self) -> None:
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        """Return the next timestamp."""
        with self._lock:
            current = utc_now()
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current


def format_uptime(seconds: float) -> str:
    """
    Format an uptime in whole hours and minutes.

    Examples:
        >>> format_uptime(3725)
        '1h 2m'
        >>> format_uptime(59)
        '0h 0m'
    """
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    return f"{hours}h {minutes}m"


def format_duration_us(duration_us: int) -> str:
    """
    Format a duration in microseconds for human-readable display.

    Examples:
        >>> format_duration_us(500)
        '500μs'
        >>> format_duration_us(1500)
        '1.50ms'
        >>> format_duration_us(1500000)
        '1.50s'
    """
    if duration_us < 1000:
        return f"{duration_us}μs"
    elif duration_us < 1_000_000:
        return f"{duration_us / 1000:.2f}ms"
    else:
        return f"{duration_us / 1_000_000:.2f}s"
