"""Utility functions for ArbiBot."""

from arbibot.utils.math import is_positive_finite, parse_decimal, safe_divide, to_fixed
from arbibot.utils.time import (
    MonotonicClock,
    format_duration_us,
    format_uptime,
    get_timestamp_us,
    start_of_day,
    utc_now,
)


__all__ = [
    "MonotonicClock",
    "format_duration_us",
    "format_uptime",
    "get_timestamp_us",
    "is_positive_finite",
    "parse_decimal",
    "safe_divide",
    "start_of_day",
    "to_fixed",
    "utc_now",
]
