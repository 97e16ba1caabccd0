"""
Unit tests for process settings.
"""

import pytest
from pydantic import ValidationError

from arbibot.config.settings import Settings, get_settings


class TestSettings:
    """Tests for environment loading and validation."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default values without environment overrides."""
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)

        settings = Settings(_env_file=None)

        assert settings.port == 8000
        assert settings.trade_execution_delay == 2.0
        assert settings.auto_start_monitoring is True
        assert settings.telegram_bot_token is None

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables are read case-insensitively."""
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("log_level", "DEBUG")
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:ABC")

        settings = Settings(_env_file=None)

        assert settings.port == 9000
        assert settings.log_level == "DEBUG"
        assert settings.telegram_bot_token.get_secret_value() == "123:ABC"

    def test_blank_token_is_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a whitespace token counts as missing."""
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "   ")

        assert Settings(_env_file=None).telegram_bot_token is None

    def test_token_is_not_printed(self) -> None:
        """Test that the secret does not leak through repr."""
        settings = Settings(_env_file=None, telegram_bot_token="123:ABC")

        assert "123:ABC" not in repr(settings)

    @pytest.mark.parametrize(
        "overrides",
        [{"port": 0}, {"trade_execution_delay": -1}, {"log_level": "TRACE"}],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        """Test range and choice validation."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)

    def test_get_settings_is_cached(self) -> None:
        """Test the cached accessor."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
