#!/usr/bin/env python3
"""
Latency Benchmark Script.

Measures the evaluation and tick path with in-memory collaborators.
"""

import asyncio
import random
import statistics
import sys
from pathlib import Path

# Add src to path for direct execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from arbibot.core.registry import SubscriberRegistry
from arbibot.simulation.monitor import PriceMonitor
from arbibot.storage.memory import MemoryLedgerStore
from arbibot.strategy.evaluator import OpportunityEvaluator
from arbibot.utils.time import format_duration_us, get_timestamp_us


def summarize(latencies: list[int]) -> dict[str, float]:
    ordered = sorted(latencies)
    return {
        "min": ordered[0],
        "max": ordered[-1],
        "avg": statistics.mean(ordered),
        "p50": statistics.median(ordered),
        "p99": ordered[int(len(ordered) * 0.99)],
    }


def benchmark_calculation(iterations: int = 10000) -> dict[str, float]:
    """Benchmark the pure margin calculation."""
    evaluator = OpportunityEvaluator(MemoryLedgerStore())
    rng = random.Random(0)
    latencies: list[int] = []

    for _ in range(iterations):
        price_a = 0.7412 * (1 + (rng.random() - 0.5) * 0.01)
        price_b = 0.7398 * (1 + (rng.random() - 0.5) * 0.01)

        start = get_timestamp_us()
        evaluator.calculate(price_a, price_b)
        latencies.append(get_timestamp_us() - start)

    return summarize(latencies)


async def benchmark_tick(iterations: int = 1000, subscribers: int = 100) -> dict[str, float]:
    """Benchmark a full tick: generate, persist, evaluate, fan out."""
    store = MemoryLedgerStore()
    registry = SubscriberRegistry()
    for _ in range(subscribers):
        registry.subscribe(lambda message: None)

    monitor = PriceMonitor(OpportunityEvaluator(store), registry, rng=random.Random(0))
    latencies: list[int] = []

    for _ in range(iterations):
        start = get_timestamp_us()
        await monitor.tick()
        latencies.append(get_timestamp_us() - start)

    return summarize(latencies)


def format_stats(stats: dict[str, float]) -> str:
    """Format stats for display."""
    return (
        f"min={format_duration_us(int(stats['min']))}, "
        f"avg={format_duration_us(int(stats['avg']))}, "
        f"p50={format_duration_us(int(stats['p50']))}, "
        f"p99={format_duration_us(int(stats['p99']))}, "
        f"max={format_duration_us(int(stats['max']))}"
    )


def main() -> int:
    """Run all benchmarks."""
    print("=" * 70)
    print("  LATENCY BENCHMARK")
    print("=" * 70)
    print()

    print("Warming up...")
    benchmark_calculation(100)
    asyncio.run(benchmark_tick(100, subscribers=1))
    print()

    print("1. Margin Calculation (10,000 iterations)")
    stats = benchmark_calculation(10000)
    print(f"   {format_stats(stats)}")
    print()

    print("2. Full Tick, 100 subscribers (1,000 iterations)")
    stats = asyncio.run(benchmark_tick(1000, subscribers=100))
    print(f"   {format_stats(stats)}")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
