"""
Unit tests for SubscriberRegistry.

Tests set semantics, snapshot delivery and failure isolation.
"""

from typing import Any

from arbibot.core.registry import SubscriberRegistry
from tests.mocks import FailingSubscriber, RecordingSubscriber


MESSAGE = {"type": "price_update", "data": {"priceA": "0.7412", "priceB": "0.7398"}}


class TestSubscribe:
    """Tests for registration."""

    def test_subscribe_then_publish(self, registry: SubscriberRegistry) -> None:
        """Test that a subscribed handle receives the message."""
        subscriber = RecordingSubscriber()
        registry.subscribe(subscriber)

        delivered = registry.publish(MESSAGE)

        assert delivered == 1
        assert subscriber.messages == [MESSAGE]

    def test_double_subscribe_delivers_once(self, registry: SubscriberRegistry) -> None:
        """Test set semantics."""
        subscriber = RecordingSubscriber()
        registry.subscribe(subscriber)
        registry.subscribe(subscriber)

        registry.publish(MESSAGE)

        assert len(registry) == 1
        assert len(subscriber.messages) == 1

    def test_unsubscribe_stops_delivery(self, registry: SubscriberRegistry) -> None:
        """Test that removed handles get nothing more."""
        subscriber = RecordingSubscriber()
        registry.subscribe(subscriber)

        assert registry.unsubscribe(subscriber) is True
        registry.publish(MESSAGE)

        assert subscriber.messages == []
        assert subscriber not in registry

    def test_unsubscribe_unknown_is_noop(self, registry: SubscriberRegistry) -> None:
        """Test removing a handle that was never added."""
        assert registry.unsubscribe(RecordingSubscriber()) is False

    def test_publish_without_subscribers(self, registry: SubscriberRegistry) -> None:
        """Test publishing into an empty registry."""
        assert registry.publish(MESSAGE) == 0

    def test_clear(self, registry: SubscriberRegistry) -> None:
        """Test removing every handle."""
        registry.subscribe(RecordingSubscriber())
        registry.subscribe(RecordingSubscriber())

        registry.clear()

        assert len(registry) == 0


class TestFailureIsolation:
    """Tests for failing handles."""

    def test_failing_handle_is_removed(self, registry: SubscriberRegistry) -> None:
        """Test that a raising handle is dropped and the others still deliver."""
        before = RecordingSubscriber()
        failing = FailingSubscriber()
        after = RecordingSubscriber()
        for handle in (before, failing, after):
            registry.subscribe(handle)

        delivered = registry.publish(MESSAGE)

        assert delivered == 2
        assert before.messages == [MESSAGE]
        assert after.messages == [MESSAGE]
        assert failing not in registry
        assert registry.failed_count == 1

        registry.publish(MESSAGE)

        assert failing.calls == 1
        assert len(after.messages) == 2

    def test_counters(self, registry: SubscriberRegistry) -> None:
        """Test delivered and failed totals."""
        registry.subscribe(RecordingSubscriber())
        registry.subscribe(FailingSubscriber())

        registry.publish(MESSAGE)
        registry.publish(MESSAGE)

        assert registry.delivered_count == 2
        assert registry.failed_count == 1


class TestSnapshotDelivery:
    """Tests for registry changes made from inside a delivery."""

    def test_handle_can_unsubscribe_itself(self, registry: SubscriberRegistry) -> None:
        """Test self-removal during publish."""
        received: list[dict[str, Any]] = []

        def once(message: dict[str, Any]) -> None:
            received.append(message)
            registry.unsubscribe(once)

        registry.subscribe(once)
        registry.publish(MESSAGE)
        registry.publish(MESSAGE)

        assert received == [MESSAGE]

    def test_handle_added_during_publish_waits_for_next(
        self, registry: SubscriberRegistry
    ) -> None:
        """Test that a handle added mid-publish misses the current message."""
        late = RecordingSubscriber()

        def adder(message: dict[str, Any]) -> None:
            registry.subscribe(late)

        registry.subscribe(adder)
        registry.publish(MESSAGE)

        assert late.messages == []

        registry.publish(MESSAGE)

        assert late.messages == [MESSAGE]

    def test_iteration_is_a_copy(self, registry: SubscriberRegistry) -> None:
        """Test that iterating while mutating is safe."""
        first = RecordingSubscriber()
        second = RecordingSubscriber()
        registry.subscribe(first)
        registry.subscribe(second)

        for handle in registry:
            registry.unsubscribe(handle)

        assert len(registry) == 0
