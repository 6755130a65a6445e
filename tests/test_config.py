# tests/test_config.py
"""
Configuration Tests - Rate Limit Config, Profiles and Settings

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tradeguard.domain.models (RateLimitConfig, Verdict, ViolationType)
- tradeguard.application.profiles (get_profile, review_config)
- tradeguard.config.settings (Settings)
- tradeguard.shared.commands (is_trading_command)
"""
import pytest
from pydantic import ValidationError

from tradeguard.application.profiles import PROFILES, get_profile, review_config
from tradeguard.config.settings import Settings
from tradeguard.domain.errors import InvalidConfigError, UnknownProfileError
from tradeguard.domain.models import RateLimitConfig, StatsSnapshot, Verdict, ViolationType
from tradeguard.shared.commands import is_trading_command

TOKEN = "123456789:" + "A" * 35


class TestRateLimitConfig:
    def test_defaults(self):
        config = RateLimitConfig()
        assert config.messages_per_minute == 10
        assert config.messages_per_hour == 100
        assert config.messages_per_day == 500
        assert config.trading_commands_per_minute == 3
        assert config.trading_commands_per_hour == 20
        assert config.global_messages_per_second == 50
        assert config.burst_limit == 5
        assert config.suspicious_activity_threshold == 3
        assert config.emergency_throttle_enabled is False
        assert config.emergency_throttle_limit == 1

    def test_trading_minute_above_general_rejected(self):
        with pytest.raises(InvalidConfigError, match="trading_commands_per_minute"):
            RateLimitConfig(messages_per_minute=2)

    def test_trading_hour_above_general_rejected(self):
        with pytest.raises(InvalidConfigError, match="trading_commands_per_hour"):
            RateLimitConfig(messages_per_hour=10)

    @pytest.mark.parametrize("value", [0, -1, 1.5, True])
    def test_non_positive_integers_rejected(self, value):
        with pytest.raises(InvalidConfigError):
            RateLimitConfig(burst_limit=value)

    def test_config_is_frozen(self):
        config = RateLimitConfig()
        with pytest.raises(Exception):
            config.burst_limit = 99

    def test_with_overrides_skips_none_and_validates(self):
        config = RateLimitConfig().with_overrides(burst_limit=7, messages_per_minute=None)
        assert config.burst_limit == 7
        assert config.messages_per_minute == 10
        with pytest.raises(InvalidConfigError):
            RateLimitConfig().with_overrides(trading_commands_per_minute=11)


class TestProfiles:
    def test_production_is_default_config(self):
        assert get_profile("production") == RateLimitConfig()

    def test_lookup_is_case_insensitive(self):
        assert get_profile(" Development ").messages_per_minute == 30

    def test_unknown_profile(self):
        with pytest.raises(UnknownProfileError):
            get_profile("chaos")

    def test_all_profiles_keep_trading_stricter(self):
        for config in PROFILES.values():
            assert config.trading_commands_per_minute <= config.messages_per_minute
            assert config.trading_commands_per_hour <= config.messages_per_hour

    def test_review_warnings(self):
        assert review_config(RateLimitConfig()) == []
        warnings = review_config(
            RateLimitConfig(messages_per_minute=100, burst_limit=200, emergency_throttle_enabled=True)
        )
        assert "High message rate limit may allow spam attacks" in warnings
        assert len(warnings) == 3


class TestVerdict:
    def test_deny_to_dict(self):
        verdict = Verdict.deny(ViolationType.BURST_LIMIT, "slow down")
        assert verdict.to_dict() == {
            "allowed": False,
            "violation_type": "burst_limit",
            "message": "slow down",
        }

    def test_admit_to_dict(self):
        verdict = Verdict(allowed=True, remaining_requests=4, reset_time=60_000)
        assert verdict.to_dict() == {"allowed": True, "remaining_requests": 4, "reset_time": 60_000}

    def test_stats_to_dict(self):
        stats = StatsSnapshot(10, 2, 1, 0, False, 3)
        assert stats.to_dict()["total_requests"] == 10
        assert stats.to_dict()["emergency_throttle_active"] is False


class TestTradingVocabulary:
    @pytest.mark.parametrize(
        "command",
        ["buy", "/BUY BTC", "sell", "trade", "/execute 12", "stop-loss", "cancel", "/orders", "position"],
    )
    def test_trading_commands(self, command):
        assert is_trading_command(command)

    @pytest.mark.parametrize("command", ["", "/status", "/help", "/balance", "hello"])
    def test_other_commands(self, command):
        assert not is_trading_command(command)


class TestSettings:
    @pytest.fixture(autouse=True)
    def isolated_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)  # no stray .env
        for name in ("TRADEGUARD_PROFILE", "MESSAGES_PER_MINUTE", "BURST_LIMIT",
                     "TRADING_COMMANDS_PER_MINUTE", "ADMIN_USERNAME"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("BOT_TOKEN", TOKEN)

    def test_defaults_to_production_profile(self):
        settings = Settings()
        assert settings.profile == "production"
        assert settings.sweep_interval_minutes == 5
        assert settings.rate_limit_config() == RateLimitConfig()

    def test_profile_and_overrides_from_env(self, monkeypatch):
        monkeypatch.setenv("TRADEGUARD_PROFILE", "staging")
        monkeypatch.setenv("BURST_LIMIT", "8")
        config = Settings().rate_limit_config()
        assert config.messages_per_minute == 20
        assert config.burst_limit == 8

    def test_override_breaking_invariant(self, monkeypatch):
        monkeypatch.setenv("TRADING_COMMANDS_PER_MINUTE", "50")
        with pytest.raises(InvalidConfigError):
            Settings().rate_limit_config()

    def test_invalid_profile(self, monkeypatch):
        monkeypatch.setenv("TRADEGUARD_PROFILE", "chaos")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_token(self, monkeypatch):
        monkeypatch.setenv("BOT_TOKEN", "not-a-token")
        with pytest.raises(ValidationError):
            Settings()

    def test_admin_username_strips_at(self, monkeypatch):
        monkeypatch.setenv("ADMIN_USERNAME", "@risk_desk")
        assert Settings().admin_username == "risk_desk"
