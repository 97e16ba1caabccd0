"""
Simulated price monitor.

Owns the periodic timer that generates synthetic venue prices, runs
the opportunity evaluator on them and fans both out to subscribers.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Mapping

from arbibot.config.constants import (
    BASE_PRICE_A,
    BASE_PRICE_B,
    PRICE_PRECISION,
    PRICE_SCENARIOS,
    PRICE_VARIATION,
)
from arbibot.core.errors import InvalidInterval, UnknownScenario
from arbibot.core.registry import SubscriberRegistry
from arbibot.core.types import MessageType, PricePair, make_message
from arbibot.strategy.evaluator import OpportunityEvaluator, OpportunitySignal
from arbibot.telemetry.metrics import MetricsCollector
from arbibot.utils.math import to_fixed
from arbibot.utils.time import get_timestamp_us, utc_now


logger = logging.getLogger(__name__)


OpportunityListener = Callable[[OpportunitySignal], Awaitable[None]]
ErrorListener = Callable[[str], Awaitable[None]]


class PriceMonitor:
    """
    Periodic price simulation loop.

    Two states: stopped and running. Starting again replaces the
    current timer, so at most one timer exists. Ticks never overlap:
    a timer tick that finds another tick in progress is skipped.
    """

    def __init__(
        self,
        evaluator: OpportunityEvaluator,
        registry: SubscriberRegistry,
        metrics: MetricsCollector | None = None,
        base_prices: tuple[float, float] = (BASE_PRICE_A, BASE_PRICE_B),
        variation: float = PRICE_VARIATION,
        scenarios: Mapping[str, tuple[float, float]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize monitor.

        Args:
            evaluator: Opportunity evaluator (persists one record per tick).
            registry: Subscribers receiving price and opportunity messages.
            metrics: Optional metrics collector.
            base_prices: Centre price per venue.
            variation: Maximum relative perturbation per tick (0.005 = ±0.5%).
            scenarios: Named literal price pairs for inject_scenario.
            rng: Random source (seed it for reproducible runs).
        """
        self._evaluator = evaluator
        self._registry = registry
        self._metrics = metrics or MetricsCollector()
        self._base_a, self._base_b = base_prices
        self._variation = variation
        self._scenarios = dict(scenarios if scenarios is not None else PRICE_SCENARIOS)
        self._rng = rng or random.Random()

        self._current = PricePair(
            price_a=to_fixed(self._base_a, PRICE_PRECISION),
            price_b=to_fixed(self._base_b, PRICE_PRECISION),
            observed_at=utc_now(),
        )
        self._listeners: list[OpportunityListener] = []
        self._error_listeners: list[ErrorListener] = []

        self._task: asyncio.Task[None] | None = None
        self._interval: int | None = None
        self._generation = 0
        self._tick_lock = asyncio.Lock()
        self._tick_count = 0

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self, interval_seconds: int) -> None:
        """
        Start (or restart) monitoring.

        Cancels any existing timer, runs one tick immediately, then
        ticks every `interval_seconds`.

        Args:
            interval_seconds: Seconds between ticks.

        Raises:
            InvalidInterval: If the interval is not a positive integer.
        """
        if (
            isinstance(interval_seconds, bool)
            or not isinstance(interval_seconds, int)
            or interval_seconds <= 0
        ):
            raise InvalidInterval(interval_seconds)

        await self._cancel_timer()
        self._generation += 1
        generation = self._generation

        await self.tick()

        # A concurrent start() or stop() during the first tick wins
        if generation != self._generation:
            return

        self._interval = interval_seconds
        self._task = asyncio.create_task(
            self._run(interval_seconds), name="price-monitor"
        )
        logger.info(f"Price monitoring started (every {interval_seconds}s)")

    async def stop(self) -> None:
        """Stop monitoring. Safe to call when already stopped."""
        self._generation += 1
        was_running = self.is_running
        await self._cancel_timer()
        self._interval = None
        if was_running:
            logger.info("Price monitoring stopped")

    async def _cancel_timer(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # Holding the lock means the timer is parked in its sleep
        async with self._tick_lock:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, interval_seconds: int) -> None:
        """Timer loop."""
        while True:
            await asyncio.sleep(interval_seconds)

            if self._tick_lock.locked():
                logger.debug("Previous tick still running, skipping")
                self._metrics.increment_counter("ticks_skipped")
                continue

            await self.tick()

    # =========================================================================
    # Ticks
    # =========================================================================

    def _perturb(self, base: float) -> float:
        """Uniform move within ±variation of the base price."""
        return base + base * (self._rng.random() - 0.5) * 2 * self._variation

    async def tick(self) -> PricePair:
        """
        Generate, evaluate and publish one new price pair.

        Failures are logged and counted, never raised, so the timer
        keeps running.

        Returns:
            The current price pair after the tick.
        """
        async with self._tick_lock:
            start_time = get_timestamp_us()
            try:
                await self._apply_prices(
                    self._perturb(self._base_a),
                    self._perturb(self._base_b),
                )
            except Exception as e:
                self._metrics.increment_counter("tick_failures")
                logger.error(f"Price tick failed: {e}")
                await self._report_error(f"Price tick failed: {e}")
            finally:
                self._metrics.record_latency("tick", get_timestamp_us() - start_time)

        return self._current

    async def inject_scenario(self, name: str) -> PricePair:
        """
        Publish a named literal price pair instead of a random one.

        Does not affect the timer schedule.

        Args:
            name: Scenario name (e.g., "high_profit").

        Returns:
            The injected price pair.

        Raises:
            UnknownScenario: If no scenario has that name.
        """
        if name not in self._scenarios:
            raise UnknownScenario(name)

        price_a, price_b = self._scenarios[name]
        async with self._tick_lock:
            await self._apply_prices(price_a, price_b)

        self._metrics.increment_counter("scenarios_injected")
        logger.info(f"Injected price scenario {name}")
        return self._current

    async def _apply_prices(self, price_a: float, price_b: float) -> None:
        """Store, evaluate and publish a price pair."""
        self._current = PricePair(
            price_a=to_fixed(price_a, PRICE_PRECISION),
            price_b=to_fixed(price_b, PRICE_PRECISION),
            observed_at=utc_now(),
        )
        self._tick_count += 1
        self._metrics.increment_counter("ticks")

        self._publish(make_message(MessageType.PRICE_UPDATE, self._current.to_dict()))

        signal = await self._evaluator.evaluate(price_a, price_b)
        if signal.record is None:
            self._metrics.increment_counter("store_failures")
        if signal.profitable:
            self._metrics.increment_counter("opportunities_profitable")

        self._publish(
            make_message(MessageType.ARBITRAGE_OPPORTUNITY, signal.to_message_data())
        )

        for listener in list(self._listeners):
            try:
                await listener(signal)
            except Exception as e:
                logger.error(f"Opportunity listener error: {e}")

    async def _report_error(self, error: str) -> None:
        for listener in list(self._error_listeners):
            try:
                await listener(error)
            except Exception as e:
                logger.error(f"Error listener failed: {e}")

    def _publish(self, message: dict) -> None:
        failed_before = self._registry.failed_count
        delivered = self._registry.publish(message)
        self._metrics.increment_counter("messages_delivered", delivered)
        dropped = self._registry.failed_count - failed_before
        if dropped:
            self._metrics.increment_counter("delivery_failures", dropped)

    # =========================================================================
    # Accessors
    # =========================================================================

    def add_opportunity_listener(self, listener: OpportunityListener) -> None:
        """Register an async callback run after every evaluation."""
        self._listeners.append(listener)

    def remove_opportunity_listener(self, listener: OpportunityListener) -> None:
        """Remove a previously registered callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Register an async callback run with the reason of every failed tick."""
        self._error_listeners.append(listener)

    def get_current_prices(self) -> PricePair:
        """Last published price pair (the default pair before the first tick)."""
        return self._current

    @property
    def scenarios(self) -> list[str]:
        """Names accepted by inject_scenario."""
        return list(self._scenarios)

    @property
    def is_running(self) -> bool:
        """Check if the timer is armed."""
        return self._task is not None and not self._task.done()

    @property
    def interval_seconds(self) -> int | None:
        """Current tick interval, None when stopped."""
        return self._interval

    @property
    def tick_count(self) -> int:
        """Number of price pairs published (ticks and scenarios)."""
        return self._tick_count
