"""
Opportunity evaluation.

Turns a pair of venue prices into a net-of-fees profitability signal
for a fixed notional trade, and appends the result to the ledger.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from arbibot.config.constants import (
    DISPLAY_PRECISION,
    ESTIMATED_GAS_USD,
    EVALUATION_PROFIT_THRESHOLD_PCT,
    NOTIONAL_TRADE_AMOUNT,
    VENUE_A_FEE_RATE,
    VENUE_B_FEE_RATE,
)
from arbibot.core.errors import InvalidPriceInput, StoreUnavailable
from arbibot.core.types import NewOpportunity, OpportunityRecord
from arbibot.storage.base import LedgerStore
from arbibot.utils.math import is_positive_finite, parse_decimal, to_fixed


logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class OpportunitySignal:
    """
    Result of evaluating one price pair.

    All money figures are in quote currency for the notional trade.
    `record` is None when the ledger append failed.
    """

    price_a: float
    price_b: float
    gross_margin_pct: float
    net_profit_pct: float
    profitable: bool
    estimated_profit: float
    estimated_gas: float
    net_profit: float
    record: OpportunityRecord | None = None

    def to_message_data(self) -> dict[str, Any]:
        """Display payload for the arbitrage_opportunity message."""
        return {
            "profitPercentage": to_fixed(self.net_profit_pct, DISPLAY_PRECISION),
            "profitable": self.profitable,
            "estimatedProfit": to_fixed(self.estimated_profit, DISPLAY_PRECISION),
            "estimatedGas": to_fixed(self.estimated_gas, DISPLAY_PRECISION),
            "netProfit": to_fixed(self.net_profit, DISPLAY_PRECISION),
        }


class OpportunityEvaluator:
    """
    Calculates the arbitrage margin between the two venues.

    The profitability cut-off is a fixed evaluation constant and is
    deliberately separate from the operator's execution threshold in
    BotSettings.
    """

    __slots__ = (
        "_store",
        "_fee_pct",
        "_gas_estimate",
        "_notional",
        "_threshold_pct",
    )

    def __init__(
        self,
        store: LedgerStore,
        fee_rates: tuple[float, float] = (VENUE_A_FEE_RATE, VENUE_B_FEE_RATE),
        gas_estimate: float = ESTIMATED_GAS_USD,
        notional: float = NOTIONAL_TRADE_AMOUNT,
        threshold_pct: float = EVALUATION_PROFIT_THRESHOLD_PCT,
    ) -> None:
        """
        Initialize evaluator.

        Args:
            store: Ledger store receiving one record per evaluation.
            fee_rates: Swap fee per venue (e.g., 0.003 = 0.3%).
            gas_estimate: Fixed gas cost per round trip.
            notional: Reference trade size.
            threshold_pct: Net profit percentage flagged as profitable.
        """
        self._store = store
        self._fee_pct = sum(fee_rates)
        self._gas_estimate = gas_estimate
        self._notional = notional
        self._threshold_pct = threshold_pct

    @staticmethod
    def _validate(value: object) -> float:
        try:
            price = parse_decimal(value)
        except (TypeError, ValueError) as e:
            raise InvalidPriceInput(value) from e
        if not is_positive_finite(price):
            raise InvalidPriceInput(value)
        return price

    def calculate(self, price_a: object, price_b: object) -> OpportunitySignal:
        """
        Evaluate a price pair without touching the store.

        Args:
            price_a: Price on venue A.
            price_b: Price on venue B.

        Returns:
            Signal with margins and absolute profit figures.

        Raises:
            InvalidPriceInput: If either price is not a positive finite number.
        """
        a = self._validate(price_a)
        b = self._validate(price_b)

        diff = abs(a - b)
        avg = (a + b) / 2
        gross_margin_pct = (diff / avg) * 100

        gross_profit = (gross_margin_pct / 100) * self._notional
        fees_cost = (self._fee_pct * self._notional) + self._gas_estimate
        net_profit = gross_profit - fees_cost
        net_profit_pct = (net_profit / self._notional) * 100

        return OpportunitySignal(
            price_a=a,
            price_b=b,
            gross_margin_pct=gross_margin_pct,
            net_profit_pct=net_profit_pct,
            profitable=net_profit_pct >= self._threshold_pct,
            estimated_profit=gross_profit,
            estimated_gas=self._gas_estimate,
            net_profit=net_profit,
        )

    async def evaluate(self, price_a: object, price_b: object) -> OpportunitySignal:
        """
        Evaluate a price pair and append the verdict to the ledger.

        A store failure is logged and the signal is returned without
        a record, so callers can still publish it.

        Raises:
            InvalidPriceInput: If either price is not a positive finite number.
        """
        signal = self.calculate(price_a, price_b)

        try:
            record = await self._store.create_opportunity(
                NewOpportunity(
                    price_a=str(signal.price_a),
                    price_b=str(signal.price_b),
                    profit_percentage=str(signal.net_profit_pct),
                    profitable=signal.profitable,
                )
            )
        except StoreUnavailable as e:
            logger.warning(f"Opportunity not persisted, store unavailable: {e}")
            return signal

        return dataclasses.replace(signal, record=record)

    @property
    def fee_pct(self) -> float:
        """Combined swap fee of both venues."""
        return self._fee_pct

    @property
    def notional(self) -> float:
        """Reference trade size."""
        return self._notional

    @property
    def threshold_pct(self) -> float:
        """Net profit percentage flagged as profitable."""
        return self._threshold_pct
