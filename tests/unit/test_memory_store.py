"""
Unit tests for MemoryLedgerStore.

Tests ordering, pagination, daily statistics and singleton updates.
"""

import dataclasses
from datetime import timedelta

import pytest

from arbibot.core.types import (
    BotSettings,
    NewOpportunity,
    NewTransaction,
    TelegramSettings,
    TransactionKind,
    TransactionStatus,
)
from arbibot.storage.base import LedgerStore
from arbibot.storage.memory import MemoryLedgerStore


def _opportunity(pct: str = "0.25", profitable: bool = False) -> NewOpportunity:
    return NewOpportunity(
        price_a="0.745", price_b="0.738", profit_percentage=pct, profitable=profitable
    )


def _success(net: str = "1.50", gas: str = "0.37") -> NewTransaction:
    return NewTransaction(
        kind=TransactionKind.ARBITRAGE,
        amount="400",
        status=TransactionStatus.SUCCESS,
        gross_profit="2.00",
        gas_fee=gas,
        net_profit=net,
        external_reference="0xabc",
    )


def _failure(reason: str = "No arbitrage opportunity found") -> NewTransaction:
    return NewTransaction(
        kind=TransactionKind.ARBITRAGE,
        amount="400",
        status=TransactionStatus.FAILED,
        reason=reason,
    )


class TestProtocol:
    """Tests for interface conformance."""

    def test_is_ledger_store(self, store: MemoryLedgerStore) -> None:
        """Test runtime protocol check."""
        assert isinstance(store, LedgerStore)


class TestOpportunities:
    """Tests for opportunity records."""

    @pytest.mark.asyncio
    async def test_empty_store_has_no_latest(self, store: MemoryLedgerStore) -> None:
        """Test latest on an empty ledger."""
        assert await store.get_latest_opportunity() is None

    @pytest.mark.asyncio
    async def test_create_stamps_id_and_time(self, store: MemoryLedgerStore) -> None:
        """Test that the store assigns identity and observation time."""
        record = await store.create_opportunity(_opportunity())

        assert record.id
        assert record.observed_at.tzinfo is not None
        assert record.profit_percentage == "0.25"

    @pytest.mark.asyncio
    async def test_latest_follows_insertion(self, store: MemoryLedgerStore) -> None:
        """Test that rapid appends keep strictly increasing timestamps."""
        records = [await store.create_opportunity(_opportunity(str(i))) for i in range(20)]

        assert await store.get_latest_opportunity() == records[-1]
        stamps = [r.observed_at for r in records]
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == len(stamps)

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store: MemoryLedgerStore) -> None:
        """Test list order and limit."""
        for i in range(5):
            await store.create_opportunity(_opportunity(str(i)))

        listed = await store.list_opportunities(limit=3)

        assert [r.profit_percentage for r in listed] == ["4", "3", "2"]


class TestTransactions:
    """Tests for the transaction ledger."""

    @pytest.mark.asyncio
    async def test_pagination(self, store: MemoryLedgerStore) -> None:
        """Test limit/offset over newest-first order."""
        for i in range(7):
            await store.create_transaction(_failure(f"reason {i}"))

        first_page = await store.list_transactions(limit=3, offset=0)
        last_page = await store.list_transactions(limit=3, offset=6)

        assert [tx.reason for tx in first_page] == ["reason 6", "reason 5", "reason 4"]
        assert [tx.reason for tx in last_page] == ["reason 0"]
        assert await store.count_transactions() == 7

    @pytest.mark.asyncio
    async def test_offset_past_end(self, store: MemoryLedgerStore) -> None:
        """Test an out-of-range page."""
        await store.create_transaction(_failure())

        assert await store.list_transactions(limit=10, offset=5) == []

    @pytest.mark.asyncio
    async def test_record_keeps_fields(self, store: MemoryLedgerStore) -> None:
        """Test that a settled trade keeps its figures."""
        record = await store.create_transaction(_success())

        assert record.is_success
        assert record.net_profit == "1.50"
        assert record.external_reference == "0xabc"


class TestDailyStats:
    """Tests for today's aggregates."""

    @pytest.mark.asyncio
    async def test_empty_day(self, store: MemoryLedgerStore) -> None:
        """Test zeroed stats without transactions."""
        stats = await store.get_daily_stats()

        assert stats.total_profit == "0.00"
        assert stats.successful_trades == 0
        assert stats.win_rate == "0.0"

    @pytest.mark.asyncio
    async def test_aggregates(self, store: MemoryLedgerStore) -> None:
        """Test profit, gas and win rate over mixed outcomes."""
        await store.create_transaction(_success(net="1.50"))
        await store.create_transaction(_success(net="2.50"))
        await store.create_transaction(_failure())

        stats = await store.get_daily_stats()

        assert stats.total_profit == "4.00"
        assert stats.successful_trades == 2
        assert stats.avg_profit == "2.00"
        assert stats.gas_spent == "0.74"
        assert stats.win_rate == "66.7"


class TestSingletons:
    """Tests for settings and status singletons."""

    @pytest.mark.asyncio
    async def test_defaults(self, store: MemoryLedgerStore) -> None:
        """Test the seeded singletons."""
        settings = await store.get_settings()
        status = await store.get_bot_status()
        telegram = await store.get_telegram_settings()

        assert settings == dataclasses.replace(BotSettings(), updated_at=settings.updated_at)
        assert status.is_active is True
        assert status.total_cycles == 0
        assert telegram.is_configured is False

    @pytest.mark.asyncio
    async def test_put_settings_restamps(self, store: MemoryLedgerStore) -> None:
        """Test that puts replace the value and refresh updated_at."""
        original = await store.get_settings()
        stale = dataclasses.replace(
            original,
            min_profit_threshold="0.5",
            updated_at=original.updated_at - timedelta(days=1),
        )

        saved = await store.put_settings(stale)

        assert saved.min_profit_threshold == "0.5"
        assert saved.updated_at > original.updated_at
        assert await store.get_settings() == saved

    @pytest.mark.asyncio
    async def test_put_telegram_settings(self, store: MemoryLedgerStore) -> None:
        """Test replacing Telegram settings."""
        await store.put_telegram_settings(TelegramSettings(bot_token="t", chat_id="1"))

        telegram = await store.get_telegram_settings()

        assert telegram.is_configured

    @pytest.mark.asyncio
    async def test_put_bot_status_updates_last_update(self, store: MemoryLedgerStore) -> None:
        """Test that status puts refresh last_update."""
        status = await store.get_bot_status()

        saved = await store.put_bot_status(dataclasses.replace(status, is_active=False))

        assert saved.is_active is False
        assert saved.last_update > status.last_update
        assert saved.started_at == status.started_at

    @pytest.mark.parametrize("limit", [0, -3])
    @pytest.mark.asyncio
    async def test_non_positive_limit(self, store: MemoryLedgerStore, limit: int) -> None:
        """Test that a non-positive limit returns nothing."""
        await store.create_transaction(_failure())

        assert await store.list_transactions(limit=limit) == []
