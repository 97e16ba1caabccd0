"""
Telegram notifications and bot commands.

Outgoing messages are queued and sent by a background worker so that
callers on the price-tick or trade path never wait on the network.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import aiohttp
import orjson

from arbibot.config.constants import (
    NOTIFICATION_QUEUE_SIZE,
    TELEGRAM_API_URL,
    TELEGRAM_TIMEOUT,
    TRADING_PAIR,
    VENUE_A_NAME,
    VENUE_B_NAME,
)
from arbibot.core.types import PricePair
from arbibot.storage.base import LedgerStore
from arbibot.utils.math import to_fixed
from arbibot.utils.time import format_uptime, utc_now

# strategy.trading imports this module
if TYPE_CHECKING:
    from arbibot.strategy.evaluator import OpportunitySignal


logger = logging.getLogger(__name__)


HELP_COMMANDS = (
    "/status - Get bot status and statistics",
    "/profit - View today's profit summary",
    "/pause - Pause automated trading",
    "/resume - Resume automated trading",
    f"/prices - Get current {TRADING_PAIR} prices",
    "/help - Show this help message",
)


def _stamp() -> str:
    return utc_now().strftime("%Y-%m-%d %H:%M:%S UTC")


class TelegramNotifier:
    """
    Sends formatted messages through the Telegram Bot API.

    Features:
    - Credentials read from the ledger store's TelegramSettings
    - Bounded fire-and-forget queue with a single sender task
    - Per-category opt-outs (trade success/failure, high profit, errors)
    - Command handling for /status, /profit, /pause, /resume, /prices, /help
    """

    def __init__(
        self,
        store: LedgerStore,
        api_url: str = TELEGRAM_API_URL,
        queue_size: int = NOTIFICATION_QUEUE_SIZE,
        timeout: float = TELEGRAM_TIMEOUT,
        price_source: Callable[[], PricePair] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize notifier.

        Args:
            store: Ledger store holding Telegram settings and bot state.
            api_url: Telegram Bot API base URL.
            queue_size: Maximum pending outgoing messages.
            timeout: Per-request timeout in seconds.
            price_source: Returns current prices for /prices.
            session: Optional pre-built HTTP session.
        """
        self._store = store
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._price_source = price_source
        self._session = session

        self._bot_token: str | None = None
        self._chat_id: str | None = None

        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._sent = 0
        self._dropped = 0

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> None:
        """(Re)load credentials from the store."""
        settings = await self._store.get_telegram_settings()
        if settings and settings.is_configured:
            self._bot_token = settings.bot_token
            self._chat_id = settings.chat_id
        else:
            self._bot_token = None
            self._chat_id = None

    async def start(self) -> None:
        """Load credentials and start the sender task."""
        await self.initialize()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._drain(), name="telegram-sender")

    async def stop(self) -> None:
        """Stop the sender task and close the HTTP session."""
        if self._worker:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
        return self._session

    async def _drain(self) -> None:
        while True:
            text = await self._queue.get()
            try:
                await self.send(text)
            except Exception as e:
                logger.error(f"Telegram sender error: {e}")
            finally:
                self._queue.task_done()

    # =========================================================================
    # Sending
    # =========================================================================

    @property
    def is_configured(self) -> bool:
        """Check if a token and chat id are loaded."""
        return bool(self._bot_token and self._chat_id)

    async def send(self, text: str) -> bool:
        """
        Send a Markdown message to the configured chat.

        Args:
            text: Message text.

        Returns:
            True if Telegram accepted the message.
        """
        if not self.is_configured:
            logger.info(f"Telegram not configured, would send: {text}")
            return False

        url = f"{self._api_url}/bot{self._bot_token}/sendMessage"
        payload = {
            "chat_id": self._chat_id,
            "text": text,
            "parse_mode": "Markdown",
        }

        try:
            session = await self._get_session()
            async with session.post(url, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    logger.warning(f"Telegram rejected message ({response.status}): {body[:200]}")
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error sending Telegram message: {e}")
            return False

        self._sent += 1
        return True

    def enqueue(self, text: str) -> bool:
        """
        Queue a message for background sending.

        Returns:
            False if the queue is full and the message was dropped.
        """
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning("Notification queue full, dropping message")
            return False
        return True

    async def flush(self) -> None:
        """Wait until every queued message has been handled."""
        await self._queue.join()

    async def test_connection(self) -> bool:
        """Send a test message synchronously."""
        return await self.send("🤖 *ArbiBot Test Message*\n\nTelegram bot connection is working!")

    # =========================================================================
    # Notifications
    # =========================================================================

    async def notify_trade_success(self, profit: str, percentage: str) -> None:
        settings = await self._store.get_telegram_settings()
        if not settings or not settings.enabled or not settings.notify_trade_success:
            return

        self.enqueue(
            f"✅ *Arbitrage Trade Successful*\n\n"
            f"💰 Net Profit: ${profit}\n"
            f"📈 Return: {percentage}%\n"
            f"⏰ {_stamp()}"
        )

    async def notify_trade_failed(self, reason: str) -> None:
        settings = await self._store.get_telegram_settings()
        if not settings or not settings.enabled or not settings.notify_trade_failed:
            return

        self.enqueue(f"❌ *Trade Failed*\n\n🚫 Reason: {reason}\n⏰ {_stamp()}")

    async def notify_high_profit_opportunity(self, percentage: str) -> None:
        """Alert when the net margin reaches the configured alert level."""
        settings = await self._store.get_telegram_settings()
        if not settings or not settings.enabled or not settings.notify_high_profit:
            return

        min_alert = float(settings.min_profit_alert)
        if float(percentage) < min_alert:
            return

        self.enqueue(
            f"🚀 *High Profit Opportunity*\n\n"
            f"📊 Potential Profit: {percentage}%\n"
            f"💎 Above your {settings.min_profit_alert}% alert threshold\n"
            f"⏰ {_stamp()}"
        )

    async def notify_error(self, error: str) -> None:
        settings = await self._store.get_telegram_settings()
        if not settings or not settings.enabled or not settings.notify_errors:
            return

        self.enqueue(f"⚠️ *System Error*\n\n🔧 Error: {error}\n⏰ {_stamp()}")

    async def on_opportunity(self, signal: "OpportunitySignal") -> None:
        """Opportunity listener for the price monitor."""
        await self.notify_high_profit_opportunity(to_fixed(signal.net_profit_pct))

    # =========================================================================
    # Commands
    # =========================================================================

    async def handle_command(self, command: str) -> str:
        """
        Produce the reply to a bot command.

        Args:
            command: Command text such as "/status".

        Returns:
            Reply text (Markdown).
        """
        handlers = {
            "/status": self._status_message,
            "/profit": self._profit_message,
            "/pause": self._pause_bot,
            "/resume": self._resume_bot,
            "/prices": self._prices_message,
            "/help": self._help_message,
        }

        parts = command.strip().split()
        # Group chats address commands as /status@BotName
        name = parts[0].split("@", 1)[0].lower() if parts else ""
        handler = handlers.get(name)
        if handler is None:
            return "Unknown command. Type /help for available commands."

        try:
            return await handler()
        except Exception as e:
            logger.error(f"Command {name} failed: {e}")
            return f"Error processing command: {e}"

    async def handle_update(self, update: dict[str, Any]) -> str | None:
        """
        Answer a Telegram webhook update.

        Only messages from the configured chat are answered; the reply
        is queued for sending.

        Returns:
            The reply text, or None if the update was ignored.
        """
        message = update.get("message")
        if not isinstance(message, dict):
            return None
        text = message.get("text")
        chat = message.get("chat")
        if not isinstance(text, str) or not isinstance(chat, dict):
            return None
        chat_id = chat.get("id")

        if not text.startswith("/"):
            return None
        if self._chat_id is None or str(chat_id) != str(self._chat_id):
            logger.warning(f"Ignoring command from unknown chat {chat_id}")
            return None

        reply = await self.handle_command(text)
        self.enqueue(reply)
        return reply

    async def _status_message(self) -> str:
        status = await self._store.get_bot_status()
        settings = await self._store.get_settings()
        if not status or not settings:
            return "❌ Bot status unavailable"

        state = "🟢 Active" if status.is_active else "🔴 Inactive"
        return (
            f"🤖 *Bot Status*\n\n"
            f"{state}\n"
            f"⏱ Uptime: {format_uptime(status.uptime_seconds())}\n"
            f"🔄 Cycles: {status.total_cycles}\n"
            f"📊 Min Profit: {settings.min_profit_threshold}%\n"
            f"🎯 Auto Trading: {'ON' if settings.auto_trading_enabled else 'OFF'}"
        )

    async def _profit_message(self) -> str:
        stats = await self._store.get_daily_stats()
        return (
            f"💰 *Today's Performance*\n\n"
            f"💵 Total Profit: ${stats.total_profit}\n"
            f"✅ Successful Trades: {stats.successful_trades}\n"
            f"📈 Win Rate: {stats.win_rate}%\n"
            f"⛽ Gas Spent: ${stats.gas_spent}\n"
            f"📊 Avg Profit: ${stats.avg_profit}"
        )

    async def _set_active(self, active: bool) -> bool:
        status = await self._store.get_bot_status()
        if not status:
            return False
        await self._store.put_bot_status(dataclasses.replace(status, is_active=active))
        return True

    async def _pause_bot(self) -> str:
        if not await self._set_active(False):
            return "❌ Cannot access bot status"
        return "⏸️ *Bot Paused*\n\nAutomatic trading has been paused. Use /resume to continue."

    async def _resume_bot(self) -> str:
        if not await self._set_active(True):
            return "❌ Cannot access bot status"
        return "▶️ *Bot Resumed*\n\nAutomatic trading has been resumed."

    async def _prices_message(self) -> str:
        if self._price_source is None:
            return "❌ Prices unavailable"

        prices = self._price_source()
        return (
            f"💱 *Current Prices*\n\n"
            f"🦄 {VENUE_A_NAME}: {prices.price_a} {TRADING_PAIR}\n"
            f"🍣 {VENUE_B_NAME}: {prices.price_b} {TRADING_PAIR}\n"
            f"📊 Difference: {to_fixed(prices.spread_pct)}%\n"
            f"⏰ {prices.observed_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"
        )

    async def _help_message(self) -> str:
        return "🤖 *Available Commands*\n\n" + "\n".join(HELP_COMMANDS)

    # =========================================================================
    # Accessors
    # =========================================================================

    def set_price_source(self, price_source: Callable[[], PricePair]) -> None:
        self._price_source = price_source

    @property
    def pending(self) -> int:
        """Messages waiting to be sent."""
        return self._queue.qsize()

    @property
    def sent_count(self) -> int:
        return self._sent

    @property
    def dropped_count(self) -> int:
        return self._dropped
