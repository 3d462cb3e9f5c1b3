"""Tests for environment-driven configuration."""

import dataclasses
import os
import pytest
from unittest.mock import patch

from config import (
    AppConfig,
    CORSConfig,
    GameConfig,
    RateLimitConfig,
    SecurityConfig,
    _env_flag,
    _parse_cors_origins,
)


class TestEnvHelpers:
    """Parsing of individual environment variables."""

    @pytest.mark.parametrize("value", ["true", "TRUE", " True "])
    def test_flag_on(self, value):
        with patch.dict(os.environ, {"SOME_FLAG": value}):
            assert _env_flag("SOME_FLAG") is True

    @pytest.mark.parametrize("value", ["false", "FALSE", "0", "1", "no", ""])
    def test_flag_off(self, value):
        """Anything but "true" switches a flag off, even "1"."""
        with patch.dict(os.environ, {"SOME_FLAG": value}):
            assert _env_flag("SOME_FLAG", default=True) is False

    def test_flag_default_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _env_flag("SOME_FLAG") is False
            assert _env_flag("SOME_FLAG", default=True) is True

    def test_cors_origins_split_and_trimmed(self):
        raw = "  http://cards.example  ,http://localhost:3000,, "
        with patch.dict(os.environ, {"CORS_ORIGINS": raw}):
            assert _parse_cors_origins() == ["http://cards.example", "http://localhost:3000"]


class TestCORS:
    def test_local_origin_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert CORSConfig().allowed_origins == ["http://localhost:8000"]

    def test_only_api_verbs_and_session_header(self):
        cors = CORSConfig()

        assert cors.allow_credentials is True
        assert set(cors.allow_methods) == {"GET", "POST", "DELETE"}
        assert "X-Session-ID" in cors.allow_headers


class TestRateLimit:
    def test_on_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            limits = RateLimitConfig()

        assert limits.enabled is True
        assert limits.requests_per_minute == 120

    def test_switched_off_with_custom_budget(self):
        with patch.dict(os.environ, {"RATE_LIMIT_ENABLED": "false", "RATE_LIMIT_RPM": "30"}):
            limits = RateLimitConfig()

        assert limits.enabled is False
        assert limits.requests_per_minute == 30


class TestSecurity:
    def test_random_key_per_instance_without_env(self):
        """Without SECRET_KEY every process signs with its own key."""
        with patch.dict(os.environ, {}, clear=True):
            first, second = SecurityConfig(), SecurityConfig()

        assert first.secret_key
        assert first.secret_key != second.secret_key

    def test_key_from_env(self):
        with patch.dict(os.environ, {"SECRET_KEY": "table-key"}):
            assert SecurityConfig().secret_key == "table-key"


class TestComputerPacing:
    """GameConfig holds the delays between the computer's steps."""

    def test_default_delays(self):
        with patch.dict(os.environ, {}, clear=True):
            pacing = GameConfig()

        assert pacing.computer_draw_delay == 0.75
        assert pacing.computer_play_delay == 1.5

    def test_delays_from_env(self):
        with patch.dict(os.environ, {"COMPUTER_DRAW_DELAY": "0", "COMPUTER_PLAY_DELAY": "0.2"}):
            pacing = GameConfig()

        assert pacing.computer_draw_delay == 0.0
        assert pacing.computer_play_delay == 0.2

    @pytest.mark.parametrize("field_name", ["computer_draw_delay", "computer_play_delay"])
    def test_negative_delay_rejected(self, field_name):
        with pytest.raises(ValueError):
            GameConfig(**{field_name: -1.0})

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            GameConfig().computer_play_delay = 3.0


class TestAppConfig:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            app_config = AppConfig()

        assert app_config.debug is False
        assert (app_config.host, app_config.port) == ("0.0.0.0", 8000)
        assert app_config.log_level == "INFO"
        assert app_config.session_ttl == 3600

    def test_from_env(self):
        env = {"DEBUG": "true", "LOG_LEVEL": "debug", "PORT": "9000", "SESSION_TTL": "60"}
        with patch.dict(os.environ, env):
            app_config = AppConfig()

        assert app_config.debug is True
        assert app_config.log_level == "DEBUG"
        assert app_config.port == 9000
        assert app_config.session_ttl == 60

    def test_sections(self):
        app_config = AppConfig()

        assert isinstance(app_config.game, GameConfig)
        assert isinstance(app_config.cors, CORSConfig)
        assert isinstance(app_config.rate_limit, RateLimitConfig)
        assert isinstance(app_config.security, SecurityConfig)
