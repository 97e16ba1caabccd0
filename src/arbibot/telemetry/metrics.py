"""
Metrics collection for the monitoring pipeline.

Tracks tick latencies and event counters with in-memory storage.
"""

import time
from collections import deque
from dataclasses import dataclass
from typing import Any


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p99_us: int = 0
    count: int = 0


class MetricsCollector:
    """
    Collects and aggregates pipeline metrics.

    Features:
    - Rolling window latency tracking
    - Counter-based event tracking
    """

    def __init__(self, latency_window_size: int = 1000) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "tick").
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)

        self._latencies[name].append(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """
        Increment a counter.

        Args:
            name: Counter name.
            value: Amount to increment.
        """
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get aggregated latency statistics.

        Args:
            name: Metric name.

        Returns:
            LatencyStats (all zeros if nothing recorded).
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p99_us=sorted_samples[min(n - 1, int(n * 0.99))],
            count=n,
        )

    @property
    def uptime_seconds(self) -> float:
        """Seconds since the collector was created."""
        return time.time() - self._start_time

    def snapshot(self) -> dict[str, Any]:
        """Counters and latency summaries as a plain dict."""
        latency: dict[str, dict[str, float]] = {}
        for name in self._latencies:
            stats = self.get_latency_stats(name)
            latency[name] = {
                "avgUs": round(stats.avg_us, 1),
                "p99Us": stats.p99_us,
                "count": stats.count,
            }

        return {
            "uptimeSeconds": round(self.uptime_seconds, 1),
            "counters": dict(self._counters),
            "latency": latency,
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._start_time = time.time()
