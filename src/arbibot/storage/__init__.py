"""Ledger storage backends."""

from arbibot.storage.base import LedgerStore
from arbibot.storage.memory import MemoryLedgerStore


__all__ = [
    "LedgerStore",
    "MemoryLedgerStore",
]
