"""
Unit tests for utility helpers, metrics and logging.
"""

import logging
import math
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from arbibot.telemetry.logger import AsyncLogger
from arbibot.telemetry.metrics import MetricsCollector
from arbibot.utils.math import is_positive_finite, parse_decimal, safe_divide, to_fixed
from arbibot.utils.time import MonotonicClock, format_uptime, start_of_day


class TestMath:
    """Tests for numeric helpers."""

    def test_to_fixed(self) -> None:
        """Test fixed-point rendering."""
        assert to_fixed(0.74123, 4) == "0.7412"
        assert to_fixed(2.5) == "2.50"
        assert to_fixed(-0.001) == "0.00"
        assert to_fixed(-1.234) == "-1.23"

    @pytest.mark.parametrize(
        "value,expected",
        [("0.7412", 0.7412), (" 1.5 ", 1.5), (3, 3.0), (Decimal("0.25"), 0.25)],
    )
    def test_parse_decimal(self, value: object, expected: float) -> None:
        """Test accepted decimal-like inputs."""
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", [True, None, "abc", [1]])
    def test_parse_decimal_rejects(self, value: object) -> None:
        """Test rejected inputs."""
        with pytest.raises(ValueError):
            parse_decimal(value)

    def test_is_positive_finite(self) -> None:
        """Test finiteness and sign checks."""
        assert is_positive_finite(0.1)
        assert not is_positive_finite(0.0)
        assert not is_positive_finite(-1.0)
        assert not is_positive_finite(math.inf)
        assert not is_positive_finite(math.nan)

    def test_safe_divide(self) -> None:
        """Test zero-denominator fallback."""
        assert safe_divide(1, 4) == 0.25
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 0, default=-1.0) == -1.0


class TestTime:
    """Tests for time helpers."""

    def test_monotonic_clock_strictly_increases(self) -> None:
        """Test that consecutive readings never repeat."""
        clock = MonotonicClock()
        readings = [clock.now() for _ in range(1000)]

        assert all(b > a for a, b in zip(readings, readings[1:]))

    def test_start_of_day(self) -> None:
        """Test UTC midnight truncation."""
        moment = datetime(2024, 3, 5, 17, 45, 12, tzinfo=UTC)

        assert start_of_day(moment) == datetime(2024, 3, 5, tzinfo=UTC)

    def test_format_uptime(self) -> None:
        """Test hours and minutes formatting."""
        assert format_uptime(0) == "0h 0m"
        assert format_uptime(3725) == "1h 2m"
        assert format_uptime(90061) == "25h 1m"


class TestMetricsCollector:
    """Tests for counters and latency stats."""

    def test_counters(self) -> None:
        """Test counter increments."""
        metrics = MetricsCollector()
        metrics.increment_counter("ticks")
        metrics.increment_counter("ticks", 2)

        assert metrics.get_counter("ticks") == 3
        assert metrics.get_counter("missing") == 0

    def test_latency_stats(self) -> None:
        """Test latency aggregation."""
        metrics = MetricsCollector()
        for value in (100, 200, 300):
            metrics.record_latency("tick", value)

        stats = metrics.get_latency_stats("tick")

        assert stats.count == 3
        assert stats.min_us == 100
        assert stats.max_us == 300
        assert stats.avg_us == pytest.approx(200.0)

    def test_snapshot_and_reset(self) -> None:
        """Test the serializable snapshot."""
        metrics = MetricsCollector()
        metrics.increment_counter("ticks")
        metrics.record_latency("tick", 50)

        snapshot = metrics.snapshot()

        assert snapshot["counters"] == {"ticks": 1}
        assert snapshot["latency"]["tick"]["count"] == 1

        metrics.reset()

        assert metrics.snapshot()["counters"] == {}


class TestAsyncLogger:
    """Tests for queue-based logging."""

    def test_writes_to_file_on_stop(self, tmp_path: Path) -> None:
        """Test that queued records reach the file handler."""
        log_file = tmp_path / "logs" / "arbibot.log"

        with AsyncLogger("arbibot.test", log_file=log_file) as async_logger:
            assert async_logger.is_running
            async_logger.logger.info("tick published")

        assert not async_logger.is_running
        assert "tick published" in log_file.read_text()

    def test_stop_detaches_handler(self) -> None:
        """Test that stopping removes the queue handler."""
        async_logger = AsyncLogger("arbibot.detach")
        async_logger.start()
        async_logger.stop()

        assert logging.getLogger("arbibot.detach").handlers == []
