"""
Trading constants and configuration values.

This module contains the fixed values used by the price simulation,
the opportunity evaluator and simulated trade execution.
"""

from typing import Final


# =============================================================================
# Venues
# =============================================================================

TRADING_PAIR: Final[str] = "USDT/XSGD"

VENUE_A_NAME: Final[str] = "Uniswap"
VENUE_B_NAME: Final[str] = "SushiSwap"


# =============================================================================
# Trading Fees & Costs
# =============================================================================

# Per-venue swap fee (0.3%)
VENUE_A_FEE_RATE: Final[float] = 0.003
VENUE_B_FEE_RATE: Final[float] = 0.003

# Approximate gas cost of one arbitrage round trip, in USD (Polygon)
ESTIMATED_GAS_USD: Final[float] = 0.37

ESTIMATED_GAS_LIMIT: Final[int] = 500_000


# =============================================================================
# Opportunity Evaluation
# =============================================================================

# Reference trade size used to turn a margin into absolute profit figures
NOTIONAL_TRADE_AMOUNT: Final[float] = 400.0

# Net profit percentage at which an opportunity is flagged profitable.
# Independent of BotSettings.min_profit_threshold used at execution time.
EVALUATION_PROFIT_THRESHOLD_PCT: Final[float] = 1.0


# =============================================================================
# Price Simulation
# =============================================================================

BASE_PRICE_A: Final[float] = 0.7412
BASE_PRICE_B: Final[float] = 0.7398

# Maximum perturbation per tick, as a fraction of the base price (0.5%)
PRICE_VARIATION: Final[float] = 0.005

PRICE_PRECISION: Final[int] = 4
DISPLAY_PRECISION: Final[int] = 2

DEFAULT_REFRESH_INTERVAL: Final[int] = 5  # seconds

# Literal venue prices for demonstration scenarios
PRICE_SCENARIOS: Final[dict[str, tuple[float, float]]] = {
    "high_profit": (0.7450, 0.7380),
    "low_profit": (0.7420, 0.7410),
    "no_profit": (0.7412, 0.7412),
}


# =============================================================================
# Bot Defaults
# =============================================================================

DEFAULT_MIN_PROFIT_THRESHOLD: Final[str] = "1.0"
DEFAULT_MAX_SLIPPAGE: Final[str] = "0.5"
DEFAULT_GAS_PRICE_STRATEGY: Final[str] = "standard"
DEFAULT_MAX_TRADE_AMOUNT: Final[str] = "1000"
DEFAULT_MIN_PROFIT_ALERT: Final[str] = "1.5"

GAS_PRICE_STRATEGIES: Final[frozenset[str]] = frozenset({"slow", "standard", "fast"})

# Simulated settlement time of a trade (seconds)
DEFAULT_TRADE_EXECUTION_DELAY: Final[float] = 2.0

RECENT_TRADES_LIMIT: Final[int] = 10
DEFAULT_PAGE_SIZE: Final[int] = 50


# =============================================================================
# Telegram
# =============================================================================

TELEGRAM_API_URL: Final[str] = "https://api.telegram.org"
TELEGRAM_TIMEOUT: Final[float] = 10.0  # seconds
TELEGRAM_TOKEN_MASK: Final[str] = "••••••••••"


# =============================================================================
# Queues
# =============================================================================

NOTIFICATION_QUEUE_SIZE: Final[int] = 100
SUBSCRIBER_QUEUE_SIZE: Final[int] = 256


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
