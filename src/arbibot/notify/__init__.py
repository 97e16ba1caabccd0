"""Outgoing notifications."""

from arbibot.notify.telegram import TelegramNotifier


__all__ = [
    "TelegramNotifier",
]
