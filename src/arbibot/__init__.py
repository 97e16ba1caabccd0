"""
ArbiBot: USDT/XSGD cross-DEX arbitrage dashboard.

Simulates prices on two decentralized exchanges, evaluates the arbitrage
margin after fees and streams the results to connected dashboards.
"""

__version__ = "1.0.0"
