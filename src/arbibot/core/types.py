"""
Type definitions for ArbiBot.

This module contains the dataclasses and enums shared by the monitor,
the evaluator, the ledger store and the dashboard. Records are frozen:
the ledger is append-only and singletons are replaced wholesale.
Wire representations use camelCase keys.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from arbibot.config.constants import (
    DEFAULT_GAS_PRICE_STRATEGY,
    DEFAULT_MAX_SLIPPAGE,
    DEFAULT_MAX_TRADE_AMOUNT,
    DEFAULT_MIN_PROFIT_ALERT,
    DEFAULT_MIN_PROFIT_THRESHOLD,
    DEFAULT_REFRESH_INTERVAL,
    ESTIMATED_GAS_LIMIT,
)
from arbibot.utils.time import utc_now


# =============================================================================
# Enums
# =============================================================================


class TransactionKind(str, Enum):
    """Ledger entry kind."""

    ARBITRAGE = "arbitrage"
    SKIP = "skip"


class TransactionStatus(str, Enum):
    """Outcome of a trade request."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class MessageType(str, Enum):
    """Real-time channel message tags."""

    PRICE_UPDATE = "price_update"
    ARBITRAGE_OPPORTUNITY = "arbitrage_opportunity"
    TRADE_EXECUTED = "trade_executed"
    BOT_STATUS_UPDATE = "bot_status_update"


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def make_message(message_type: MessageType, data: Any) -> dict[str, Any]:
    """Build a tagged real-time message."""
    return {"type": message_type.value, "data": data}


# =============================================================================
# Market Data
# =============================================================================


@dataclass(slots=True, frozen=True)
class PricePair:
    """Latest quoted price on each venue."""

    price_a: str
    price_b: str
    observed_at: datetime

    @property
    def spread_pct(self) -> float:
        """Absolute price difference as a percentage of the mean price."""
        a = float(self.price_a)
        b = float(self.price_b)
        avg = (a + b) / 2
        return abs(a - b) / avg * 100 if avg > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "priceA": self.price_a,
            "priceB": self.price_b,
            "observedAt": _iso(self.observed_at),
        }


@dataclass(slots=True, frozen=True)
class OpportunityRecord:
    """
    Persisted evaluation of one price pair.

    `profit_percentage` is the net margin after fees and gas, relative
    to the notional trade amount.
    """

    id: str
    price_a: str
    price_b: str
    profit_percentage: str
    profitable: bool
    observed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "priceA": self.price_a,
            "priceB": self.price_b,
            "profitPercentage": self.profit_percentage,
            "profitable": self.profitable,
            "observedAt": _iso(self.observed_at),
        }


@dataclass(slots=True, frozen=True)
class NewOpportunity:
    """Opportunity fields supplied by the evaluator before the store stamps it."""

    price_a: str
    price_b: str
    profit_percentage: str
    profitable: bool


# =============================================================================
# Ledger
# =============================================================================


@dataclass(slots=True, frozen=True)
class NewTransaction:
    """
    Transaction fields supplied by trade execution.

    Raises:
        ValueError: If the success/reason invariants do not hold.
    """

    kind: TransactionKind
    amount: str
    status: TransactionStatus
    gross_profit: str | None = None
    gas_fee: str | None = None
    net_profit: str | None = None
    reason: str | None = None
    external_reference: str | None = None

    def __post_init__(self) -> None:
        settled = (
            self.gross_profit is not None
            and self.net_profit is not None
            and self.external_reference is not None
        )
        if (self.status == TransactionStatus.SUCCESS) != settled:
            raise ValueError(
                "Successful transactions need gross profit, net profit and a reference; "
                "other statuses must not carry them"
            )
        if (self.status != TransactionStatus.SUCCESS) != (self.reason is not None):
            raise ValueError("A reason is required exactly when the transaction did not succeed")


@dataclass(slots=True, frozen=True)
class TransactionRecord:
    """Persisted ledger entry."""

    id: str
    kind: TransactionKind
    amount: str
    status: TransactionStatus
    observed_at: datetime
    gross_profit: str | None = None
    gas_fee: str | None = None
    net_profit: str | None = None
    reason: str | None = None
    external_reference: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == TransactionStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "amount": self.amount,
            "profit": self.gross_profit,
            "gasFee": self.gas_fee,
            "netProfit": self.net_profit,
            "status": self.status.value,
            "reason": self.reason,
            "timestamp": _iso(self.observed_at),
            "txHash": self.external_reference,
        }


@dataclass(slots=True, frozen=True)
class DailyStats:
    """Aggregated results of today's transactions."""

    total_profit: str = "0.00"
    successful_trades: int = 0
    avg_profit: str = "0.00"
    gas_spent: str = "0.00"
    win_rate: str = "0.0"

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProfit": self.total_profit,
            "successfulTrades": self.successful_trades,
            "avgProfit": self.avg_profit,
            "gasSpent": self.gas_spent,
            "winRate": self.win_rate,
        }


# =============================================================================
# Singletons
# =============================================================================


@dataclass(slots=True, frozen=True)
class BotSettings:
    """Operator-editable trading parameters."""

    min_profit_threshold: str = DEFAULT_MIN_PROFIT_THRESHOLD
    max_slippage: str = DEFAULT_MAX_SLIPPAGE
    gas_limit: int = ESTIMATED_GAS_LIMIT
    gas_price_strategy: str = DEFAULT_GAS_PRICE_STRATEGY
    auto_trading_enabled: bool = False
    max_trade_amount: str = DEFAULT_MAX_TRADE_AMOUNT
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "minProfitThreshold": self.min_profit_threshold,
            "maxSlippage": self.max_slippage,
            "gasLimit": self.gas_limit,
            "gasPriceStrategy": self.gas_price_strategy,
            "autoTradingEnabled": self.auto_trading_enabled,
            "maxTradeAmount": self.max_trade_amount,
            "refreshInterval": self.refresh_interval,
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(slots=True, frozen=True)
class TelegramSettings:
    """Notification channel configuration."""

    bot_token: str | None = None
    chat_id: str | None = None
    enabled: bool = False
    notify_trade_success: bool = True
    notify_trade_failed: bool = True
    notify_high_profit: bool = True
    notify_errors: bool = True
    min_profit_alert: str = DEFAULT_MIN_PROFIT_ALERT
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def to_dict(self, mask: str | None = None) -> dict[str, Any]:
        """
        Wire form.

        Args:
            mask: When given, replaces a present bot token.
        """
        token = self.bot_token
        if mask is not None and token:
            token = mask
        return {
            "botToken": token,
            "chatId": self.chat_id,
            "enabled": self.enabled,
            "notifyTradeSuccess": self.notify_trade_success,
            "notifyTradeFailed": self.notify_trade_failed,
            "notifyHighProfit": self.notify_high_profit,
            "notifyErrors": self.notify_errors,
            "minProfitAlert": self.min_profit_alert,
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(slots=True, frozen=True)
class BotStatus:
    """Run state of the trading bot."""

    is_active: bool = True
    total_cycles: int = 0
    started_at: datetime = field(default_factory=utc_now)
    last_update: datetime = field(default_factory=utc_now)

    def uptime_seconds(self, now: datetime | None = None) -> int:
        """Whole seconds since the bot was started."""
        elapsed = (now or utc_now()) - self.started_at
        return max(0, int(elapsed.total_seconds()))

    def to_dict(self, now: datetime | None = None) -> dict[str, Any]:
        return {
            "isActive": self.is_active,
            "uptime": self.uptime_seconds(now),
            "totalCycles": self.total_cycles,
            "lastUpdate": _iso(self.last_update),
        }
