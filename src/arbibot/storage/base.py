"""
Ledger store interface.

Any backend that implements this protocol can replace the in-memory
store without touching the monitor, evaluator or trading code.
Implementations raise StoreUnavailable when they cannot serve a call.
"""

from typing import Protocol, runtime_checkable

from arbibot.core.types import (
    BotSettings,
    BotStatus,
    DailyStats,
    NewOpportunity,
    NewTransaction,
    OpportunityRecord,
    TelegramSettings,
    TransactionRecord,
)


@runtime_checkable
class LedgerStore(Protocol):
    """Append-only opportunity/transaction history plus singleton settings."""

    # Opportunities

    async def create_opportunity(self, opportunity: NewOpportunity) -> OpportunityRecord: ...

    async def get_latest_opportunity(self) -> OpportunityRecord | None: ...

    async def list_opportunities(self, limit: int = 50) -> list[OpportunityRecord]: ...

    # Transactions

    async def create_transaction(self, transaction: NewTransaction) -> TransactionRecord: ...

    async def list_transactions(self, limit: int = 50, offset: int = 0) -> list[TransactionRecord]: ...

    async def count_transactions(self) -> int: ...

    async def get_daily_stats(self) -> DailyStats: ...

    # Singletons

    async def get_settings(self) -> BotSettings | None: ...

    async def put_settings(self, settings: BotSettings) -> BotSettings: ...

    async def get_telegram_settings(self) -> TelegramSettings | None: ...

    async def put_telegram_settings(self, settings: TelegramSettings) -> TelegramSettings: ...

    async def get_bot_status(self) -> BotStatus | None: ...

    async def put_bot_status(self, status: BotStatus) -> BotStatus: ...
