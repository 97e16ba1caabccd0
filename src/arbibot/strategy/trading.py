"""
Simulated trade execution.

Turns the latest evaluated opportunity into a ledger entry: a skip
when the margin is below the operator's threshold, a settled trade
otherwise. No orders leave the process.
"""

import asyncio
import dataclasses
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from arbibot.config.constants import (
    DEFAULT_TRADE_EXECUTION_DELAY,
    DISPLAY_PRECISION,
    ESTIMATED_GAS_USD,
)
from arbibot.core.types import (
    NewTransaction,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)
from arbibot.notify.telegram import TelegramNotifier
from arbibot.storage.base import LedgerStore
from arbibot.strategy.evaluator import OpportunitySignal
from arbibot.telemetry.metrics import MetricsCollector
from arbibot.utils.math import parse_decimal, to_fixed


logger = logging.getLogger(__name__)


class TradeRejected(Exception):
    """A trade request could not be carried out."""


@dataclass(slots=True, frozen=True)
class TradeResult:
    """Outcome of one trade request."""

    success: bool
    tx_hash: str | None = None
    profit: str | None = None
    gas_fee: str | None = None
    profit_pct: str | None = None
    error: str | None = None
    transaction: TransactionRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.success:
            data.update(txHash=self.tx_hash, profit=self.profit, gasFee=self.gas_fee)
        else:
            data["error"] = self.error
        return data


@dataclass(slots=True, frozen=True)
class ReturnEstimate:
    """Projected returns for a trade size at the latest margin."""

    profit: str
    gas: str
    net: str

    def to_dict(self) -> dict[str, str]:
        return {"profit": self.profit, "gas": self.gas, "net": self.net}


def _new_tx_hash() -> str:
    return "0x" + secrets.token_hex(32)


class TradeService:
    """
    Executes simulated arbitrage trades and keeps the ledger.

    Features:
    - Threshold check against BotSettings.min_profit_threshold
    - Skipped / successful / failed transaction records
    - Telegram notifications on completion
    - Optional auto-trading driven by monitor opportunities
    """

    def __init__(
        self,
        store: LedgerStore,
        notifier: TelegramNotifier | None = None,
        metrics: MetricsCollector | None = None,
        execution_delay: float = DEFAULT_TRADE_EXECUTION_DELAY,
        gas_fee: float = ESTIMATED_GAS_USD,
        on_executed: Callable[[TradeResult], None] | None = None,
    ) -> None:
        """
        Initialize trade service.

        Args:
            store: Ledger store.
            notifier: Optional notifier for trade outcomes.
            metrics: Optional metrics collector.
            execution_delay: Simulated settlement time in seconds.
            gas_fee: Simulated gas cost per trade.
            on_executed: Called with every TradeResult (e.g., to broadcast it).
        """
        self._store = store
        self._notifier = notifier
        self._metrics = metrics or MetricsCollector()
        self._execution_delay = execution_delay
        self._gas_fee = gas_fee
        self._on_executed = on_executed

        self._auto_task: asyncio.Task[TradeResult] | None = None

    async def execute_trade(self, amount: float, slippage: float) -> TradeResult:
        """
        Execute a simulated trade of `amount` at the latest opportunity.

        Args:
            amount: Trade size in quote currency.
            slippage: Accepted slippage percentage (recorded only).

        Returns:
            TradeResult; failures are reported, not raised.
        """
        logger.info(f"Executing trade amount={amount} slippage={slippage}%")

        try:
            result = await self._execute(amount)
        except Exception as e:
            reason = str(e) or type(e).__name__
            transaction = await self._record_failure(amount, reason)
            result = TradeResult(success=False, error=reason, transaction=transaction)
            self._metrics.increment_counter("trades_failed")
            logger.warning(f"Trade failed: {reason}")
            if self._notifier:
                await self._notifier.notify_trade_failed(reason)
        else:
            if result.success and self._notifier:
                await self._notifier.notify_trade_success(result.profit, result.profit_pct)

        if self._on_executed:
            self._on_executed(result)
        return result

    async def _execute(self, amount: float) -> TradeResult:
        settings = await self._store.get_settings()
        if settings is None:
            raise TradeRejected("Bot settings not found")

        if amount <= 0:
            raise TradeRejected("Amount must be positive")
        max_amount = parse_decimal(settings.max_trade_amount)
        if amount > max_amount:
            raise TradeRejected(f"Amount {amount} exceeds max trade amount {settings.max_trade_amount}")

        if self._execution_delay > 0:
            await asyncio.sleep(self._execution_delay)

        opportunity = await self._store.get_latest_opportunity()
        if opportunity is None:
            raise TradeRejected("No arbitrage opportunity found")

        profit_pct = parse_decimal(opportunity.profit_percentage)
        threshold = parse_decimal(settings.min_profit_threshold)

        if profit_pct < threshold:
            reason = (
                f"Profit {to_fixed(profit_pct, DISPLAY_PRECISION)}% "
                f"below threshold {settings.min_profit_threshold}%"
            )
            transaction = await self._store.create_transaction(
                NewTransaction(
                    kind=TransactionKind.SKIP,
                    amount=str(amount),
                    status=TransactionStatus.SKIPPED,
                    reason=reason,
                )
            )
            self._metrics.increment_counter("trades_skipped")
            logger.info(f"Trade skipped: {reason}")
            return TradeResult(
                success=False, error="Profit below threshold", transaction=transaction
            )

        gross_profit = (profit_pct / 100) * amount
        net_profit = gross_profit - self._gas_fee
        tx_hash = _new_tx_hash()

        transaction = await self._store.create_transaction(
            NewTransaction(
                kind=TransactionKind.ARBITRAGE,
                amount=str(amount),
                status=TransactionStatus.SUCCESS,
                gross_profit=str(gross_profit),
                gas_fee=str(self._gas_fee),
                net_profit=str(net_profit),
                external_reference=tx_hash,
            )
        )

        status = await self._store.get_bot_status()
        if status:
            await self._store.put_bot_status(
                dataclasses.replace(status, total_cycles=status.total_cycles + 1)
            )

        self._metrics.increment_counter("trades_succeeded")
        logger.info(f"Trade settled {tx_hash} net={to_fixed(net_profit)}")

        return TradeResult(
            success=True,
            tx_hash=tx_hash,
            profit=to_fixed(net_profit),
            gas_fee=to_fixed(self._gas_fee),
            profit_pct=to_fixed(profit_pct),
            transaction=transaction,
        )

    async def _record_failure(self, amount: float, reason: str) -> TransactionRecord | None:
        try:
            return await self._store.create_transaction(
                NewTransaction(
                    kind=TransactionKind.ARBITRAGE,
                    amount=str(amount),
                    status=TransactionStatus.FAILED,
                    reason=reason,
                )
            )
        except Exception as e:
            logger.error(f"Could not record failed trade: {e}")
            return None

    async def estimate_returns(self, amount: float) -> ReturnEstimate:
        """
        Project returns for `amount` at the latest opportunity's margin.

        Args:
            amount: Trade size in quote currency.
        """
        gas = to_fixed(self._gas_fee)
        opportunity = await self._store.get_latest_opportunity()
        if opportunity is None:
            return ReturnEstimate(profit="0.00", gas=gas, net="0.00")

        profit_pct = parse_decimal(opportunity.profit_percentage)
        gross_profit = (profit_pct / 100) * amount
        return ReturnEstimate(
            profit=to_fixed(gross_profit),
            gas=gas,
            net=to_fixed(gross_profit - self._gas_fee),
        )

    # =========================================================================
    # Auto-trading
    # =========================================================================

    async def on_opportunity(self, signal: OpportunitySignal) -> None:
        """
        Opportunity listener for the price monitor.

        Starts a background trade of max_trade_amount when auto-trading
        is enabled, the bot is active, the signal is profitable and no
        automatic trade is already in flight.
        """
        if not signal.profitable or self.auto_trade_in_flight:
            return

        settings = await self._store.get_settings()
        status = await self._store.get_bot_status()
        if not settings or not settings.auto_trading_enabled:
            return
        if not status or not status.is_active:
            return

        amount = parse_decimal(settings.max_trade_amount)
        slippage = parse_decimal(settings.max_slippage)
        logger.info(f"Auto-trading {amount} at {to_fixed(signal.net_profit_pct)}% net")
        self._auto_task = asyncio.create_task(
            self.execute_trade(amount, slippage), name="auto-trade"
        )

    async def stop(self) -> None:
        """Cancel an in-flight automatic trade."""
        if self._auto_task and not self._auto_task.done():
            self._auto_task.cancel()
            try:
                await self._auto_task
            except asyncio.CancelledError:
                pass
        self._auto_task = None

    @property
    def auto_trade_in_flight(self) -> bool:
        return self._auto_task is not None and not self._auto_task.done()
