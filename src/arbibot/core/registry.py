"""
Subscriber registry for real-time fan-out.

Holds the set of live output channels the price monitor publishes
into. Registration happens on request-handling paths while publish
runs on the timer path.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any


logger = logging.getLogger(__name__)


# A handle receives one message per publish and must not block
Subscriber = Callable[[dict[str, Any]], None]


class SubscriberRegistry:
    """
    Set of subscriber handles with error-isolated delivery.

    Features:
    - Set semantics (subscribing twice delivers once)
    - Delivery over a snapshot, so handles may unsubscribe themselves
      or others from inside a callback
    - Failing handles are removed automatically
    """

    def __init__(self) -> None:
        """Initialize registry."""
        # dict keeps insertion order, values unused
        self._subscribers: dict[Subscriber, None] = {}
        self._lock = threading.Lock()
        self._delivered = 0
        self._failed = 0

    def subscribe(self, handle: Subscriber) -> None:
        """
        Register a handle.

        Args:
            handle: Callable taking one message dict.
        """
        with self._lock:
            self._subscribers[handle] = None

    def unsubscribe(self, handle: Subscriber) -> bool:
        """
        Remove a handle.

        Args:
            handle: Handle to remove.

        Returns:
            True if the handle was registered.
        """
        with self._lock:
            return self._subscribers.pop(handle, False) is None

    def publish(self, message: dict[str, Any]) -> int:
        """
        Deliver a message to every currently subscribed handle.

        Args:
            message: Message to deliver.

        Returns:
            Number of successful deliveries.
        """
        with self._lock:
            snapshot = list(self._subscribers)

        delivered = 0
        failed: list[Subscriber] = []

        for handle in snapshot:
            try:
                handle(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping subscriber after delivery failure: {e!r}")
                failed.append(handle)

        if failed:
            with self._lock:
                for handle in failed:
                    self._subscribers.pop(handle, None)

        self._delivered += delivered
        self._failed += len(failed)
        return delivered

    def clear(self) -> None:
        """Remove all handles."""
        with self._lock:
            self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, handle: object) -> bool:
        return handle in self._subscribers

    def __iter__(self) -> Iterator[Subscriber]:
        with self._lock:
            return iter(list(self._subscribers))

    @property
    def delivered_count(self) -> int:
        """Total successful deliveries."""
        return self._delivered

    @property
    def failed_count(self) -> int:
        """Total deliveries that raised and caused removal."""
        return self._failed
