"""Mock implementations for testing."""

from tests.mocks.store import FailingLedgerStore, SlowLedgerStore
from tests.mocks.subscribers import FailingSubscriber, RecordingSubscriber


__all__ = [
    "FailingLedgerStore",
    "FailingSubscriber",
    "RecordingSubscriber",
    "SlowLedgerStore",
]
