"""Telemetry module for logging and metrics."""

from arbibot.telemetry.logger import AsyncLogger, setup_logging
from arbibot.telemetry.metrics import MetricsCollector


__all__ = [
    "AsyncLogger",
    "MetricsCollector",
    "setup_logging",
]
