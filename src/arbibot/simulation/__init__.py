"""Price simulation for the two monitored venues."""

from arbibot.simulation.monitor import ErrorListener, OpportunityListener, PriceMonitor


__all__ = [
    "ErrorListener",
    "OpportunityListener",
    "PriceMonitor",
]
