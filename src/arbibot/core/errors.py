"""
Exception hierarchy for ArbiBot.

Input errors also derive from ValueError so callers that only know
about built-in exceptions can still catch them.
"""


class ArbiBotError(Exception):
    """Base exception for ArbiBot errors."""


class InvalidPriceInput(ArbiBotError, ValueError):
    """A price handed to the evaluator is non-numeric, non-finite or not positive."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid price: {value!r}")
        self.value = value


class InvalidInterval(ArbiBotError, ValueError):
    """The monitoring interval is not a positive integer."""

    def __init__(self, interval: object) -> None:
        super().__init__(f"Interval must be a positive integer number of seconds, got {interval!r}")
        self.interval = interval


class UnknownScenario(ArbiBotError, ValueError):
    """No price scenario is registered under the given name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown price scenario: {name!r}")
        self.name = name


class StoreUnavailable(ArbiBotError):
    """The ledger store could not complete a read or append."""


class DeliveryFailure(ArbiBotError):
    """A message could not be handed to a subscriber channel."""
