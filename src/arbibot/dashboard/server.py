"""
FastAPI server for the arbitrage dashboard.

Serves the HTML dashboard, the REST control surface and the `/ws`
real-time channel. All state lives in the ArbitrageBot stored on
`app.state.bot`.
"""

import asyncio
import dataclasses
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import orjson
from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from arbibot import __version__
from arbibot.config.constants import (
    DEFAULT_GAS_PRICE_STRATEGY,
    DEFAULT_MAX_SLIPPAGE,
    DEFAULT_MAX_TRADE_AMOUNT,
    DEFAULT_MIN_PROFIT_ALERT,
    DEFAULT_MIN_PROFIT_THRESHOLD,
    DEFAULT_PAGE_SIZE,
    DEFAULT_REFRESH_INTERVAL,
    ESTIMATED_GAS_LIMIT,
    GAS_PRICE_STRATEGIES,
    RECENT_TRADES_LIMIT,
    SUBSCRIBER_QUEUE_SIZE,
    TELEGRAM_TOKEN_MASK,
    TRADING_PAIR,
)
from arbibot.config.settings import Settings, get_settings
from arbibot.core.engine import ArbitrageBot
from arbibot.core.errors import DeliveryFailure
from arbibot.core.types import BotSettings, MessageType, TelegramSettings, make_message
from arbibot.utils.math import parse_decimal, to_fixed


logger = logging.getLogger(__name__)


# =============================================================================
# Real-time channel
# =============================================================================


class WebSocketChannel:
    """
    Subscriber handle for one WebSocket client.

    Publishing only enqueues; a per-connection sender task does the
    network I/O. A client whose buffer is full is dropped.
    """

    def __init__(self, websocket: WebSocket, maxsize: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self._websocket = websocket
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)

    def __call__(self, message: dict[str, Any]) -> None:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            raise DeliveryFailure("Client send buffer full") from None

    async def run(self) -> None:
        """Send queued messages until cancelled or the socket fails."""
        while True:
            message = await self._queue.get()
            await self._websocket.send_text(orjson.dumps(message).decode())

    @property
    def pending(self) -> int:
        return self._queue.qsize()


async def websocket_endpoint(websocket: WebSocket) -> None:
    bot: ArbitrageBot = websocket.app.state.bot
    await websocket.accept()

    channel = WebSocketChannel(websocket, bot.settings.subscriber_queue_size)
    channel(make_message(MessageType.PRICE_UPDATE, bot.monitor.get_current_prices().to_dict()))
    bot.registry.subscribe(channel)
    sender = asyncio.create_task(channel.run(), name="ws-sender")

    try:
        # Client messages carry no meaning, read only to notice disconnects
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        bot.registry.unsubscribe(channel)
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"WebSocket sender ended: {e}")


# =============================================================================
# Request models
# =============================================================================


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class MonitoringRequest(CamelModel):
    interval_seconds: int = Field(gt=0)


class ScenarioRequest(CamelModel):
    scenario: str


class TradeRequest(CamelModel):
    amount: float | None = None
    slippage: float | None = None


class EstimateRequest(CamelModel):
    amount: float = Field(gt=0)


class BotSettingsPayload(CamelModel):
    min_profit_threshold: str = DEFAULT_MIN_PROFIT_THRESHOLD
    max_slippage: str = DEFAULT_MAX_SLIPPAGE
    gas_limit: int = Field(default=ESTIMATED_GAS_LIMIT, gt=0)
    gas_price_strategy: str = DEFAULT_GAS_PRICE_STRATEGY
    auto_trading_enabled: bool = False
    max_trade_amount: str = DEFAULT_MAX_TRADE_AMOUNT
    refresh_interval: int = Field(default=DEFAULT_REFRESH_INTERVAL, gt=0)

    @field_validator("min_profit_threshold", "max_slippage", "max_trade_amount")
    @classmethod
    def numeric_string(cls, v: str) -> str:
        parse_decimal(v.strip())
        return v.strip()

    @field_validator("gas_price_strategy")
    @classmethod
    def known_strategy(cls, v: str) -> str:
        if v not in GAS_PRICE_STRATEGIES:
            raise ValueError(f"gas price strategy must be one of {sorted(GAS_PRICE_STRATEGIES)}")
        return v


class TelegramSettingsPayload(CamelModel):
    bot_token: str | None = None
    chat_id: str | None = None
    enabled: bool = False
    notify_trade_success: bool = True
    notify_trade_failed: bool = True
    notify_high_profit: bool = True
    notify_errors: bool = True
    min_profit_alert: str = DEFAULT_MIN_PROFIT_ALERT

    @field_validator("min_profit_alert")
    @classmethod
    def numeric_string(cls, v: str) -> str:
        parse_decimal(v.strip())
        return v.strip()


# =============================================================================
# Application
# =============================================================================


def _bot(request: Request) -> ArbitrageBot:
    return request.app.state.bot


def _broadcast(bot: ArbitrageBot, message_type: MessageType, data: Any) -> None:
    bot.registry.publish(make_message(message_type, data))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    bot: ArbitrageBot = app.state.bot
    await bot.start()
    try:
        yield
    finally:
        await bot.shutdown()


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": errors})


def create_app(settings: Settings | None = None, bot: ArbitrageBot | None = None) -> FastAPI:
    """
    Build the dashboard application.

    Args:
        settings: Process settings (loaded from the environment if omitted).
        bot: Pre-built bot, mainly for tests.
    """
    app = FastAPI(title="ArbiBot", version=__version__, lifespan=lifespan)
    app.state.bot = bot or ArbitrageBot(settings or get_settings())
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]

    app.get("/", response_class=HTMLResponse)(get_dashboard)
    app.get("/api/stats")(get_stats)
    app.get("/api/bot-status")(get_bot_status)
    app.post("/api/bot/pause")(pause_bot)
    app.post("/api/bot/resume")(resume_bot)
    app.get("/api/prices")(get_prices)
    app.post("/api/monitoring/start")(start_monitoring)
    app.post("/api/monitoring/stop")(stop_monitoring)
    app.post("/api/simulate-price")(simulate_price)
    app.get("/api/recent-trades")(get_recent_trades)
    app.get("/api/transactions")(get_transactions)
    app.post("/api/execute-trade")(execute_trade)
    app.post("/api/estimate-returns")(estimate_returns)
    app.get("/api/bot-settings")(get_bot_settings)
    app.put("/api/bot-settings")(replace_bot_settings)
    app.patch("/api/bot-settings")(update_bot_settings)
    app.get("/api/telegram-settings")(get_telegram_settings)
    app.put("/api/telegram-settings")(replace_telegram_settings)
    app.post("/api/test-telegram")(test_telegram)
    app.post("/api/telegram/webhook")(telegram_webhook)
    app.get("/api/status")(get_status)
    app.websocket("/ws")(websocket_endpoint)
    return app


# =============================================================================
# Handlers
# =============================================================================


async def get_dashboard() -> HTMLResponse:
    return HTMLResponse(content=DASHBOARD_HTML)


async def get_stats(request: Request) -> dict[str, Any]:
    stats = await _bot(request).store.get_daily_stats()
    return stats.to_dict()


async def get_bot_status(request: Request) -> dict[str, Any]:
    status = await _bot(request).store.get_bot_status()
    if status is None:
        raise HTTPException(status_code=404, detail="Bot status not found")
    return status.to_dict()


async def _set_active(request: Request, active: bool) -> dict[str, Any]:
    bot = _bot(request)
    status = await bot.store.get_bot_status()
    if status is None:
        raise HTTPException(status_code=404, detail="Bot status not found")

    status = await bot.store.put_bot_status(dataclasses.replace(status, is_active=active))
    data = status.to_dict()
    _broadcast(bot, MessageType.BOT_STATUS_UPDATE, data)
    logger.info(f"Bot {'resumed' if active else 'paused'}")
    return data


async def pause_bot(request: Request) -> dict[str, Any]:
    return await _set_active(request, False)


async def resume_bot(request: Request) -> dict[str, Any]:
    return await _set_active(request, True)


async def get_prices(request: Request) -> dict[str, Any]:
    bot = _bot(request)
    prices = bot.monitor.get_current_prices().to_dict()
    latest = await bot.store.get_latest_opportunity()

    opportunity = None
    if latest is not None:
        opportunity = {
            "profitPercentage": to_fixed(parse_decimal(latest.profit_percentage)),
            "profitable": latest.profitable,
        }
    return {**prices, "pair": TRADING_PAIR, "opportunity": opportunity}


async def start_monitoring(request: Request, body: MonitoringRequest) -> dict[str, Any]:
    bot = _bot(request)
    try:
        await bot.monitor.start(body.interval_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"running": bot.monitor.is_running, "intervalSeconds": bot.monitor.interval_seconds}


async def stop_monitoring(request: Request) -> dict[str, Any]:
    bot = _bot(request)
    await bot.monitor.stop()
    return {"running": bot.monitor.is_running}


async def simulate_price(request: Request, body: ScenarioRequest) -> dict[str, Any]:
    bot = _bot(request)
    try:
        prices = await bot.monitor.inject_scenario(body.scenario)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"success": True, "scenario": body.scenario, "prices": prices.to_dict()}


async def get_recent_trades(request: Request) -> list[dict[str, Any]]:
    transactions = await _bot(request).store.list_transactions(limit=RECENT_TRADES_LIMIT)
    return [tx.to_dict() for tx in transactions]


async def get_transactions(
    request: Request, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
) -> dict[str, Any]:
    if page < 1 or limit < 1:
        raise HTTPException(status_code=400, detail="page and limit must be positive")

    store = _bot(request).store
    transactions = await store.list_transactions(limit=limit, offset=(page - 1) * limit)
    total = await store.count_transactions()
    return {
        "transactions": [tx.to_dict() for tx in transactions],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": -(-total // limit),
        },
    }


async def execute_trade(request: Request, body: TradeRequest) -> dict[str, Any]:
    if body.amount is None or body.slippage is None:
        raise HTTPException(status_code=400, detail="Amount and slippage are required")
    if body.amount <= 0 or body.slippage < 0:
        raise HTTPException(status_code=400, detail="Amount must be positive and slippage non-negative")

    result = await _bot(request).trading.execute_trade(body.amount, body.slippage)
    return result.to_dict()


async def estimate_returns(request: Request, body: EstimateRequest) -> dict[str, Any]:
    estimate = await _bot(request).trading.estimate_returns(body.amount)
    return estimate.to_dict()


async def get_bot_settings(request: Request) -> dict[str, Any]:
    settings = await _bot(request).store.get_settings()
    if settings is None:
        raise HTTPException(status_code=404, detail="Bot settings not found")
    return settings.to_dict()


async def _save_bot_settings(bot: ArbitrageBot, settings: BotSettings) -> dict[str, Any]:
    saved = await bot.store.put_settings(settings)
    if bot.monitor.is_running and bot.monitor.interval_seconds != saved.refresh_interval:
        await bot.restart_monitoring(saved.refresh_interval)
    logger.info("Bot settings updated")
    return saved.to_dict()


async def replace_bot_settings(request: Request, body: BotSettingsPayload) -> dict[str, Any]:
    return await _save_bot_settings(_bot(request), BotSettings(**body.model_dump()))


async def update_bot_settings(request: Request, body: BotSettingsPayload) -> dict[str, Any]:
    bot = _bot(request)
    current = await bot.store.get_settings() or BotSettings()
    merged = dataclasses.replace(current, **body.model_dump(exclude_unset=True))
    return await _save_bot_settings(bot, merged)


async def get_telegram_settings(request: Request) -> dict[str, Any]:
    settings = await _bot(request).store.get_telegram_settings() or TelegramSettings()
    return settings.to_dict(mask=TELEGRAM_TOKEN_MASK)


async def replace_telegram_settings(
    request: Request, body: TelegramSettingsPayload
) -> dict[str, Any]:
    bot = _bot(request)
    current = await bot.store.get_telegram_settings() or TelegramSettings()

    values = body.model_dump()
    # A masked token echoed back by the dashboard means "unchanged"
    if values["bot_token"] == TELEGRAM_TOKEN_MASK:
        values["bot_token"] = current.bot_token

    await bot.store.put_telegram_settings(TelegramSettings(**values))
    await bot.notifier.initialize()
    logger.info("Telegram settings updated")
    return {"success": True}


async def test_telegram(request: Request) -> dict[str, Any]:
    success = await _bot(request).notifier.test_connection()
    return {"success": success}


async def telegram_webhook(request: Request) -> dict[str, Any]:
    try:
        update = orjson.loads(await request.body())
    except orjson.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail="Invalid update payload") from e
    if not isinstance(update, dict):
        raise HTTPException(status_code=400, detail="Invalid update payload")

    reply = await _bot(request).notifier.handle_update(update)
    return {"ok": True, "handled": reply is not None}


async def get_status(request: Request) -> dict[str, Any]:
    bot = _bot(request)
    notifier = bot.notifier
    return {
        "version": __version__,
        "monitoring": {
            "running": bot.monitor.is_running,
            "intervalSeconds": bot.monitor.interval_seconds,
            "tickCount": bot.monitor.tick_count,
            "scenarios": bot.monitor.scenarios,
            "subscribers": len(bot.registry),
        },
        "notifications": {
            "configured": notifier.is_configured,
            "pending": notifier.pending,
            "sent": notifier.sent_count,
            "dropped": notifier.dropped_count,
        },
        "metrics": bot.metrics.snapshot(),
    }


DASHBOARD_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>ArbiBot</title>
    <style>
        :root {
            --bg: #09090b; --bg2: #18181b; --bg3: #27272a;
            --border: #3f3f46; --text: #fafafa; --text2: #a1a1aa; --text3: #71717a;
            --accent: #3b82f6; --green: #22c55e; --red: #ef4444; --yellow: #eab308;
        }
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { font-family: -apple-system, BlinkMacSystemFont, "Inter", sans-serif; background: var(--bg); color: var(--text); min-height: 100vh; }
        .app { max-width: 1000px; margin: 0 auto; padding: 32px 24px; }
        .header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 24px; }
        .logo { font-size: 20px; font-weight: 600; }
        .status { padding: 6px 12px; border-radius: 6px; font-size: 13px; }
        .status.on { background: rgba(34,197,94,0.1); color: var(--green); }
        .status.off { background: rgba(239,68,68,0.1); color: var(--red); }
        .stats { display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; margin-bottom: 20px; }
        .stat, .card { background: var(--bg2); border: 1px solid var(--border); border-radius: 10px; padding: 16px; }
        .stat-label { font-size: 11px; color: var(--text3); text-transform: uppercase; margin-bottom: 6px; }
        .stat-value { font-size: 22px; font-weight: 600; font-variant-numeric: tabular-nums; }
        .grid { display: grid; grid-template-columns: 1fr 1fr; gap: 16px; margin-bottom: 16px; }
        .card h3 { font-size: 12px; color: var(--text2); text-transform: uppercase; margin-bottom: 12px; }
        .row { display: flex; justify-content: space-between; padding: 6px 0; font-size: 13px; border-bottom: 1px solid var(--bg3); }
        .pos { color: var(--green); } .neg { color: var(--red); }
        .btn { padding: 8px 14px; border: none; border-radius: 6px; font-size: 13px; cursor: pointer; background: var(--bg3); color: var(--text); margin: 0 6px 6px 0; }
        .btn.primary { background: var(--accent); }
        input { background: var(--bg3); border: 1px solid var(--border); color: var(--text); border-radius: 6px; padding: 7px 10px; width: 110px; margin-right: 6px; }
        #result { font-size: 13px; color: var(--text2); margin-top: 8px; }
        @media (max-width: 800px) { .grid { grid-template-columns: 1fr; } .stats { grid-template-columns: 1fr 1fr; } }
    </style>
</head>
<body>
    <div class="app">
        <div class="header">
            <div class="logo">ArbiBot &middot; USDT/XSGD</div>
            <div id="status" class="status off">Disconnected</div>
        </div>
        <div class="stats">
            <div class="stat"><div class="stat-label">Today's Profit</div><div class="stat-value" id="profit">$0.00</div></div>
            <div class="stat"><div class="stat-label">Trades</div><div class="stat-value" id="trades">0</div></div>
            <div class="stat"><div class="stat-label">Win Rate</div><div class="stat-value" id="winrate">0.0%</div></div>
            <div class="stat"><div class="stat-label">Gas Spent</div><div class="stat-value" id="gas">$0.00</div></div>
        </div>
        <div class="grid">
            <div class="card">
                <h3>Prices</h3>
                <div class="row"><span>Uniswap</span><span id="priceA">-</span></div>
                <div class="row"><span>SushiSwap</span><span id="priceB">-</span></div>
                <div class="row"><span>Net Margin</span><span id="margin">-</span></div>
                <div class="row"><span>Estimated Net Profit</span><span id="net">-</span></div>
            </div>
            <div class="card">
                <h3>Controls</h3>
                <div>
                    <button class="btn" onclick="scenario('high_profit')">High Profit</button>
                    <button class="btn" onclick="scenario('low_profit')">Low Profit</button>
                    <button class="btn" onclick="scenario('no_profit')">No Profit</button>
                </div>
                <div>
                    <button class="btn" onclick="post('/api/bot/pause')">Pause</button>
                    <button class="btn" onclick="post('/api/bot/resume')">Resume</button>
                </div>
                <div style="margin-top: 8px">
                    <input id="amount" type="number" value="100" min="1">
                    <button class="btn primary" onclick="trade()">Execute Trade</button>
                </div>
                <div id="result"></div>
            </div>
        </div>
        <div class="card">
            <h3>Recent Trades</h3>
            <div id="history"></div>
        </div>
    </div>
    <script>
        let ws;

        function connect() {
            const proto = location.protocol === 'https:' ? 'wss:' : 'ws:';
            ws = new WebSocket(`${proto}//${location.host}/ws`);
            ws.onopen = () => setStatus(true);
            ws.onclose = () => { setStatus(false); setTimeout(connect, 2000); };
            ws.onmessage = e => handle(JSON.parse(e.data));
        }

        function setStatus(on) {
            const el = document.getElementById('status');
            el.className = 'status ' + (on ? 'on' : 'off');
            el.textContent = on ? 'Live' : 'Disconnected';
        }

        function handle(msg) {
            if (msg.type === 'price_update') {
                document.getElementById('priceA').textContent = msg.data.priceA;
                document.getElementById('priceB').textContent = msg.data.priceB;
            } else if (msg.type === 'arbitrage_opportunity') {
                const m = document.getElementById('margin');
                m.textContent = msg.data.profitPercentage + '%';
                m.className = msg.data.profitable ? 'pos' : 'neg';
                document.getElementById('net').textContent = '$' + msg.data.netProfit;
            } else if (msg.type === 'trade_executed') {
                refresh();
            } else if (msg.type === 'bot_status_update') {
                document.getElementById('result').textContent = msg.data.isActive ? 'Bot active' : 'Bot paused';
            }
        }

        async function post(path, body) {
            const res = await fetch(path, {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify(body || {}),
            });
            return res.json();
        }

        async function scenario(name) {
            await post('/api/simulate-price', {scenario: name});
        }

        async function trade() {
            const amount = parseFloat(document.getElementById('amount').value);
            document.getElementById('result').textContent = 'Executing...';
            const r = await post('/api/execute-trade', {amount, slippage: 0.5});
            document.getElementById('result').textContent = r.success
                ? `Settled: net $${r.profit} (${r.txHash.slice(0, 10)}...)`
                : `Not executed: ${r.error || JSON.stringify(r.detail)}`;
        }

        async function refresh() {
            const stats = await (await fetch('/api/stats')).json();
            document.getElementById('profit').textContent = '$' + stats.totalProfit;
            document.getElementById('trades').textContent = stats.successfulTrades;
            document.getElementById('winrate').textContent = stats.winRate + '%';
            document.getElementById('gas').textContent = '$' + stats.gasSpent;

            const trades = await (await fetch('/api/recent-trades')).json();
            document.getElementById('history').innerHTML = trades.map(t =>
                `<div class="row"><span>${t.status} &middot; $${t.amount}</span>` +
                `<span class="${t.status === 'success' ? 'pos' : 'neg'}">${t.netProfit ?? t.reason}</span></div>`
            ).join('');
        }

        connect();
        refresh();
    </script>
</body>
</html>"""

