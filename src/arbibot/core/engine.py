"""
Bot orchestrator.

Wires the ledger store, evaluator, price monitor, notifier and trade
service together and owns their lifecycle.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from arbibot.config.settings import Settings
from arbibot.core.registry import SubscriberRegistry
from arbibot.core.types import MessageType, TelegramSettings, make_message
from arbibot.notify.telegram import TelegramNotifier
from arbibot.simulation.monitor import PriceMonitor
from arbibot.storage.base import LedgerStore
from arbibot.storage.memory import MemoryLedgerStore
from arbibot.strategy.evaluator import OpportunityEvaluator
from arbibot.strategy.trading import TradeResult, TradeService
from arbibot.telemetry.metrics import MetricsCollector


logger = logging.getLogger(__name__)


class ArbitrageBot:
    """
    Composition root of the arbitrage dashboard.

    Manages the lifecycle of:
    - Price simulation and opportunity evaluation
    - Real-time subscriber fan-out
    - Telegram notifications
    - Simulated trade execution
    """

    def __init__(self, settings: Settings, store: LedgerStore | None = None) -> None:
        """
        Initialize the bot.

        Args:
            settings: Process settings.
            store: Ledger store (in-memory store seeded from settings if omitted).
        """
        self._settings = settings
        self._running = False

        self._metrics = MetricsCollector()
        self._store = store or MemoryLedgerStore(
            telegram_settings=self._initial_telegram_settings(settings)
        )
        self._registry = SubscriberRegistry()

        self._evaluator = OpportunityEvaluator(self._store)
        self._monitor = PriceMonitor(
            evaluator=self._evaluator,
            registry=self._registry,
            metrics=self._metrics,
        )
        self._notifier = TelegramNotifier(
            store=self._store,
            api_url=settings.telegram_api_url,
            queue_size=settings.notification_queue_size,
            price_source=self._monitor.get_current_prices,
        )
        self._trading = TradeService(
            store=self._store,
            notifier=self._notifier,
            metrics=self._metrics,
            execution_delay=settings.trade_execution_delay,
            on_executed=self._on_trade_executed,
        )

        self._monitor.add_opportunity_listener(self._notifier.on_opportunity)
        self._monitor.add_opportunity_listener(self._trading.on_opportunity)
        self._monitor.add_error_listener(self._notifier.notify_error)

    @staticmethod
    def _initial_telegram_settings(settings: Settings) -> TelegramSettings:
        token = settings.telegram_bot_token
        bot_token = token.get_secret_value() if token else None
        return TelegramSettings(
            bot_token=bot_token,
            chat_id=settings.telegram_chat_id,
            enabled=bool(bot_token and settings.telegram_chat_id),
        )

    def _on_trade_executed(self, result: TradeResult) -> None:
        self._registry.publish(make_message(MessageType.TRADE_EXECUTED, result.to_dict()))

    async def start(self) -> None:
        """Start notifications and, if configured, price monitoring."""
        logger.info("Starting arbitrage bot...")
        await self._notifier.start()

        if self._settings.auto_start_monitoring:
            bot_settings = await self._store.get_settings()
            interval = bot_settings.refresh_interval if bot_settings else None
            if interval:
                await self._monitor.start(interval)

        self._running = True
        logger.info("Arbitrage bot started")

    async def restart_monitoring(self, interval_seconds: int) -> None:
        """Restart the price monitor with a new interval."""
        await self._monitor.start(interval_seconds)

    async def shutdown(self) -> None:
        """Gracefully stop every component."""
        logger.info("Shutting down arbitrage bot...")
        self._running = False

        await self._monitor.stop()
        await self._trading.stop()
        await self._notifier.stop()
        self._registry.clear()

        logger.info("Arbitrage bot shutdown complete")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    @property
    def evaluator(self) -> OpportunityEvaluator:
        return self._evaluator

    @property
    def monitor(self) -> PriceMonitor:
        return self._monitor

    @property
    def notifier(self) -> TelegramNotifier:
        return self._notifier

    @property
    def trading(self) -> TradeService:
        return self._trading

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics


@asynccontextmanager
async def create_bot(settings: Settings) -> AsyncIterator[ArbitrageBot]:
    """
    Create and manage bot lifecycle.

    Usage:
        async with create_bot(settings) as bot:
            await bot.monitor.inject_scenario("high_profit")
    """
    bot = ArbitrageBot(settings)

    try:
        await bot.start()
        yield bot
    finally:
        await bot.shutdown()
