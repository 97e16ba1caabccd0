"""Configuration module for ArbiBot."""

from arbibot.config.constants import (
    EVALUATION_PROFIT_THRESHOLD_PCT,
    NOTIONAL_TRADE_AMOUNT,
    PRICE_SCENARIOS,
    TRADING_PAIR,
)
from arbibot.config.settings import Settings, get_settings


__all__ = [
    "EVALUATION_PROFIT_THRESHOLD_PCT",
    "NOTIONAL_TRADE_AMOUNT",
    "PRICE_SCENARIOS",
    "Settings",
    "TRADING_PAIR",
    "get_settings",
]
