"""Subscriber handles for registry and monitor tests."""

from typing import Any


class RecordingSubscriber:
    """Keeps every message it receives."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    def of_type(self, message_type: str) -> list[dict[str, Any]]:
        """Messages whose `type` tag matches."""
        return [m for m in self.messages if m["type"] == message_type]

    @property
    def types(self) -> list[str]:
        return [m["type"] for m in self.messages]


class FailingSubscriber:
    """Raises on every delivery."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or ConnectionResetError("client went away")
        self.calls = 0

    def __call__(self, message: dict[str, Any]) -> None:
        self.calls += 1
        raise self.error
