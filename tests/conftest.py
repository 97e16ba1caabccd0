"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import random
from collections.abc import AsyncIterator

import pytest

from arbibot.config.settings import Settings
from arbibot.core.registry import SubscriberRegistry
from arbibot.notify.telegram import TelegramNotifier
from arbibot.simulation.monitor import PriceMonitor
from arbibot.storage.memory import MemoryLedgerStore
from arbibot.strategy.evaluator import OpportunityEvaluator
from arbibot.strategy.trading import TradeService
from arbibot.telemetry.metrics import MetricsCollector
from tests.mocks import RecordingSubscriber


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Process settings with no settlement delay and no auto-start."""
    return Settings(
        _env_file=None,
        trade_execution_delay=0.0,
        auto_start_monitoring=False,
        telegram_bot_token=None,
        telegram_chat_id=None,
    )


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def store() -> MemoryLedgerStore:
    """Fresh in-memory ledger store with default singletons."""
    return MemoryLedgerStore()


@pytest.fixture
def registry() -> SubscriberRegistry:
    """Empty subscriber registry."""
    return SubscriberRegistry()


@pytest.fixture
def recorder(registry: SubscriberRegistry) -> RecordingSubscriber:
    """Subscriber already registered with the registry."""
    subscriber = RecordingSubscriber()
    registry.subscribe(subscriber)
    return subscriber


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector."""
    return MetricsCollector()


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def evaluator(store: MemoryLedgerStore) -> OpportunityEvaluator:
    """Evaluator with default fees, gas and notional."""
    return OpportunityEvaluator(store)


@pytest.fixture
async def monitor(
    evaluator: OpportunityEvaluator,
    registry: SubscriberRegistry,
    metrics: MetricsCollector,
) -> AsyncIterator[PriceMonitor]:
    """Price monitor with a seeded random source, stopped on teardown."""
    price_monitor = PriceMonitor(
        evaluator=evaluator,
        registry=registry,
        metrics=metrics,
        rng=random.Random(42),
    )
    yield price_monitor
    await price_monitor.stop()


@pytest.fixture
async def notifier(store: MemoryLedgerStore) -> AsyncIterator[TelegramNotifier]:
    """Notifier without credentials (sending is a logged no-op)."""
    telegram = TelegramNotifier(store=store, api_url="http://telegram.test")
    yield telegram
    await telegram.stop()


@pytest.fixture
async def trade_service(
    store: MemoryLedgerStore,
    notifier: TelegramNotifier,
    metrics: MetricsCollector,
) -> AsyncIterator[TradeService]:
    """Trade service with no settlement delay."""
    service = TradeService(
        store=store,
        notifier=notifier,
        metrics=metrics,
        execution_delay=0.0,
    )
    yield service
    await service.stop()
