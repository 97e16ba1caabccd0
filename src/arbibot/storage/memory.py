"""
In-memory ledger store.

Keeps everything for the lifetime of the process. Timestamps come
from a monotonic clock, so list order, insertion order and
observed_at order all agree.
"""

import dataclasses
import logging
import uuid

from arbibot.core.types import (
    BotSettings,
    BotStatus,
    DailyStats,
    NewOpportunity,
    NewTransaction,
    OpportunityRecord,
    TelegramSettings,
    TransactionRecord,
    TransactionStatus,
)
from arbibot.utils.math import safe_divide, to_fixed
from arbibot.utils.time import MonotonicClock, start_of_day


logger = logging.getLogger(__name__)


class MemoryLedgerStore:
    """
    List-backed implementation of LedgerStore.

    Opportunities and transactions are append-only; the three
    singletons are replaced wholesale on every put.
    """

    def __init__(
        self,
        settings: BotSettings | None = None,
        telegram_settings: TelegramSettings | None = None,
        clock: MonotonicClock | None = None,
    ) -> None:
        """
        Initialize store with default singletons.

        Args:
            settings: Initial bot settings.
            telegram_settings: Initial Telegram settings.
            clock: Timestamp source.
        """
        self._clock = clock or MonotonicClock()
        self._opportunities: list[OpportunityRecord] = []
        self._transactions: list[TransactionRecord] = []

        now = self._clock.now()
        self._settings: BotSettings | None = settings or BotSettings(updated_at=now)
        self._telegram_settings: TelegramSettings | None = telegram_settings or TelegramSettings(
            updated_at=now
        )
        self._bot_status: BotStatus | None = BotStatus(started_at=now, last_update=now)

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # =========================================================================
    # Opportunities
    # =========================================================================

    async def create_opportunity(self, opportunity: NewOpportunity) -> OpportunityRecord:
        record = OpportunityRecord(
            id=self._new_id(),
            price_a=opportunity.price_a,
            price_b=opportunity.price_b,
            profit_percentage=opportunity.profit_percentage,
            profitable=opportunity.profitable,
            observed_at=self._clock.now(),
        )
        self._opportunities.append(record)
        return record

    async def get_latest_opportunity(self) -> OpportunityRecord | None:
        if not self._opportunities:
            return None
        # Ties on observed_at resolve to the later insertion
        latest_index = max(
            range(len(self._opportunities)),
            key=lambda i: (self._opportunities[i].observed_at, i),
        )
        return self._opportunities[latest_index]

    async def list_opportunities(self, limit: int = 50) -> list[OpportunityRecord]:
        return self._newest_first(self._opportunities)[:limit]

    # =========================================================================
    # Transactions
    # =========================================================================

    async def create_transaction(self, transaction: NewTransaction) -> TransactionRecord:
        record = TransactionRecord(
            id=self._new_id(),
            kind=transaction.kind,
            amount=transaction.amount,
            status=transaction.status,
            observed_at=self._clock.now(),
            gross_profit=transaction.gross_profit,
            gas_fee=transaction.gas_fee,
            net_profit=transaction.net_profit,
            reason=transaction.reason,
            external_reference=transaction.external_reference,
        )
        self._transactions.append(record)
        logger.debug(f"Recorded {record.kind.value} transaction {record.id} ({record.status.value})")
        return record

    async def list_transactions(self, limit: int = 50, offset: int = 0) -> list[TransactionRecord]:
        offset = max(0, offset)
        return self._newest_first(self._transactions)[offset : offset + max(0, limit)]

    async def count_transactions(self) -> int:
        return len(self._transactions)

    async def get_daily_stats(self) -> DailyStats:
        today = start_of_day(self._clock.now())
        todays = [tx for tx in self._transactions if tx.observed_at >= today]
        successful = [tx for tx in todays if tx.status == TransactionStatus.SUCCESS]

        total_profit = sum(float(tx.net_profit or "0") for tx in successful)
        total_gas = sum(float(tx.gas_fee or "0") for tx in successful)
        avg_profit = safe_divide(total_profit, len(successful))
        win_rate = safe_divide(len(successful), len(todays)) * 100

        return DailyStats(
            total_profit=to_fixed(total_profit),
            successful_trades=len(successful),
            avg_profit=to_fixed(avg_profit),
            gas_spent=to_fixed(total_gas),
            win_rate=to_fixed(win_rate, 1),
        )

    # =========================================================================
    # Singletons
    # =========================================================================

    async def get_settings(self) -> BotSettings | None:
        return self._settings

    async def put_settings(self, settings: BotSettings) -> BotSettings:
        self._settings = dataclasses.replace(settings, updated_at=self._clock.now())
        return self._settings

    async def get_telegram_settings(self) -> TelegramSettings | None:
        return self._telegram_settings

    async def put_telegram_settings(self, settings: TelegramSettings) -> TelegramSettings:
        self._telegram_settings = dataclasses.replace(settings, updated_at=self._clock.now())
        return self._telegram_settings

    async def get_bot_status(self) -> BotStatus | None:
        return self._bot_status

    async def put_bot_status(self, status: BotStatus) -> BotStatus:
        self._bot_status = dataclasses.replace(status, last_update=self._clock.now())
        return self._bot_status

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _newest_first(records: list) -> list:
        indexed = sorted(
            enumerate(records),
            key=lambda pair: (pair[1].observed_at, pair[0]),
            reverse=True,
        )
        return [record for _, record in indexed]

    @property
    def opportunity_count(self) -> int:
        """Number of stored opportunities."""
        return len(self._opportunities)
