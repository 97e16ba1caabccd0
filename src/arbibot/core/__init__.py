"""Core module containing the data model, error taxonomy and subscriber registry."""

from arbibot.core.errors import (
    ArbiBotError,
    DeliveryFailure,
    InvalidInterval,
    InvalidPriceInput,
    StoreUnavailable,
    UnknownScenario,
)
from arbibot.core.registry import Subscriber, SubscriberRegistry
from arbibot.core.types import (
    BotSettings,
    BotStatus,
    DailyStats,
    MessageType,
    NewOpportunity,
    NewTransaction,
    OpportunityRecord,
    PricePair,
    TelegramSettings,
    TransactionKind,
    TransactionRecord,
    TransactionStatus,
)


__all__ = [
    "ArbiBotError",
    "BotSettings",
    "BotStatus",
    "DailyStats",
    "DeliveryFailure",
    "InvalidInterval",
    "InvalidPriceInput",
    "MessageType",
    "NewOpportunity",
    "NewTransaction",
    "OpportunityRecord",
    "PricePair",
    "StoreUnavailable",
    "Subscriber",
    "SubscriberRegistry",
    "TelegramSettings",
    "TransactionKind",
    "TransactionRecord",
    "TransactionStatus",
    "UnknownScenario",
]
