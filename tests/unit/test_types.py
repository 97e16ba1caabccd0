"""
Unit tests for ArbiBot data types.

Tests ledger invariants and wire representations.
"""

from datetime import UTC, datetime, timedelta

import pytest

from arbibot.core.types import (
    BotStatus,
    MessageType,
    NewTransaction,
    PricePair,
    TelegramSettings,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
    make_message,
)


class TestNewTransaction:
    """Tests for transaction field invariants."""

    def test_success_requires_figures(self) -> None:
        """Test that a success without profit figures is rejected."""
        with pytest.raises(ValueError):
            NewTransaction(
                kind=TransactionKind.ARBITRAGE,
                amount="100",
                status=TransactionStatus.SUCCESS,
            )

    def test_success_rejects_reason(self) -> None:
        """Test that a success cannot carry a reason."""
        with pytest.raises(ValueError):
            NewTransaction(
                kind=TransactionKind.ARBITRAGE,
                amount="100",
                status=TransactionStatus.SUCCESS,
                gross_profit="1.0",
                net_profit="0.63",
                external_reference="0x1",
                reason="why",
            )

    @pytest.mark.parametrize("status", [TransactionStatus.FAILED, TransactionStatus.SKIPPED])
    def test_non_success_requires_reason(self, status: TransactionStatus) -> None:
        """Test that failures and skips need a reason."""
        with pytest.raises(ValueError):
            NewTransaction(kind=TransactionKind.SKIP, amount="100", status=status)

    def test_failure_rejects_reference(self) -> None:
        """Test that a failure cannot carry settlement data."""
        with pytest.raises(ValueError):
            NewTransaction(
                kind=TransactionKind.ARBITRAGE,
                amount="100",
                status=TransactionStatus.FAILED,
                reason="boom",
                gross_profit="1.0",
                net_profit="0.63",
                external_reference="0x1",
            )

    def test_valid_skip(self) -> None:
        """Test a well-formed skip."""
        tx = NewTransaction(
            kind=TransactionKind.SKIP,
            amount="100",
            status=TransactionStatus.SKIPPED,
            reason="Profit 0.25% below threshold 1.0%",
        )

        assert tx.reason.startswith("Profit")


class TestWireFormat:
    """Tests for camelCase dictionaries."""

    def test_price_pair(self) -> None:
        """Test price pair keys and spread."""
        moment = datetime(2024, 1, 1, tzinfo=UTC)
        pair = PricePair(price_a="0.7450", price_b="0.7380", observed_at=moment)

        assert pair.to_dict() == {
            "priceA": "0.7450",
            "priceB": "0.7380",
            "observedAt": "2024-01-01T00:00:00+00:00",
        }
        assert pair.spread_pct == pytest.approx(0.944, abs=1e-3)

    def test_transaction_record(self) -> None:
        """Test ledger entry keys."""
        record = TransactionRecord(
            id="tx-1",
            kind=TransactionKind.SKIP,
            amount="100",
            status=TransactionStatus.SKIPPED,
            observed_at=datetime(2024, 1, 1, tzinfo=UTC),
            reason="low",
        )

        data = record.to_dict()

        assert data["type"] == "skip"
        assert data["status"] == "skipped"
        assert data["txHash"] is None
        assert data["reason"] == "low"
        assert record.is_success is False

    def test_telegram_token_masked(self) -> None:
        """Test that a mask hides a present token only."""
        configured = TelegramSettings(bot_token="123:secret", chat_id="42")
        empty = TelegramSettings()

        assert configured.to_dict(mask="****")["botToken"] == "****"
        assert configured.to_dict()["botToken"] == "123:secret"
        assert empty.to_dict(mask="****")["botToken"] is None

    def test_bot_status_uptime(self) -> None:
        """Test uptime computed from started_at."""
        started = datetime(2024, 1, 1, tzinfo=UTC)
        status = BotStatus(started_at=started, last_update=started)

        data = status.to_dict(now=started + timedelta(minutes=2, seconds=5))

        assert data["uptime"] == 125
        assert data["isActive"] is True

    def test_make_message(self) -> None:
        """Test message envelope."""
        assert make_message(MessageType.TRADE_EXECUTED, {"success": True}) == {
            "type": "trade_executed",
            "data": {"success": True},
        }
