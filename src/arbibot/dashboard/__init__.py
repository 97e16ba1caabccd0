"""Dashboard module: REST control surface and real-time channel."""

from arbibot.dashboard.server import WebSocketChannel, create_app


__all__ = [
    "WebSocketChannel",
    "create_app",
]
