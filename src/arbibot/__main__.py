"""
Entry point for ArbiBot.

Usage:
    python -m arbibot
    arbibot  # if installed via pip
"""

import sys


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    import uvicorn
    from pydantic import ValidationError

    from arbibot import __version__
    from arbibot.config.constants import TRADING_PAIR, VENUE_A_NAME, VENUE_B_NAME
    from arbibot.config.settings import get_settings
    from arbibot.dashboard.server import create_app
    from arbibot.telemetry.logger import setup_logging

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     ARBIBOT v{__version__:<49}║
║                                                               ║
║     Simulated {TRADING_PAIR} arbitrage dashboard                     ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}")
        return 1

    print("Configuration:")
    print(f"  Venues:         {VENUE_A_NAME} / {VENUE_B_NAME}")
    print(f"  Dashboard:      http://{settings.host}:{settings.port}")
    print(f"  Auto-monitor:   {'Enabled' if settings.auto_start_monitoring else 'Disabled'}")
    print(f"  Trade delay:    {settings.trade_execution_delay:.1f}s")
    print(f"  Telegram:       {'Configured' if settings.telegram_bot_token else 'Not configured'}")
    print()

    async_logger = setup_logging(level=settings.log_level, log_file=settings.log_file)

    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_config=None,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        print("\nInterrupted by user")
    finally:
        async_logger.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
