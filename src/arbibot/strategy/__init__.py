"""Opportunity evaluation and simulated trade execution."""

from arbibot.strategy.evaluator import OpportunityEvaluator, OpportunitySignal
from arbibot.strategy.trading import ReturnEstimate, TradeRejected, TradeResult, TradeService


__all__ = [
    "OpportunityEvaluator",
    "OpportunitySignal",
    "ReturnEstimate",
    "TradeRejected",
    "TradeResult",
    "TradeService",
]
