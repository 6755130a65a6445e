# src/tradeguard/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Loads bot credentials, the admission profile, per-limit overrides and logging
options from environment variables or a .env file.

Files that USE this module:
- tradeguard.app (loads settings and builds the engine config)

Files that this module USES:
- tradeguard.application.profiles (get_profile for TRADEGUARD_PROFILE)
- tradeguard.domain.models (RateLimitConfig)
- tradeguard.shared.validators (validation functions for settings)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tradeguard.application.profiles import PROFILES, get_profile
from tradeguard.domain.models import RateLimitConfig
from tradeguard.shared.validators import validate_bot_token, validate_username


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Telegram ---
    bot_token: str = Field(..., alias="BOT_TOKEN")
    admin_username: str = Field(default="", alias="ADMIN_USERNAME")

    # --- Admission profile ---
    profile: str = Field(default="production", alias="TRADEGUARD_PROFILE")

    # --- Per-limit overrides (None keeps the profile value) ---
    messages_per_minute: Optional[int] = Field(default=None, alias="MESSAGES_PER_MINUTE", ge=1)
    messages_per_hour: Optional[int] = Field(default=None, alias="MESSAGES_PER_HOUR", ge=1)
    messages_per_day: Optional[int] = Field(default=None, alias="MESSAGES_PER_DAY", ge=1)
    trading_commands_per_minute: Optional[int] = Field(
        default=None, alias="TRADING_COMMANDS_PER_MINUTE", ge=1
    )
    trading_commands_per_hour: Optional[int] = Field(
        default=None, alias="TRADING_COMMANDS_PER_HOUR", ge=1
    )
    global_messages_per_second: Optional[int] = Field(
        default=None, alias="GLOBAL_MESSAGES_PER_SECOND", ge=1
    )
    burst_limit: Optional[int] = Field(default=None, alias="BURST_LIMIT", ge=1)
    suspicious_activity_threshold: Optional[int] = Field(
        default=None, alias="SUSPICIOUS_ACTIVITY_THRESHOLD", ge=1
    )
    emergency_throttle_enabled: Optional[bool] = Field(
        default=None, alias="EMERGENCY_THROTTLE_ENABLED"
    )
    emergency_throttle_limit: Optional[int] = Field(
        default=None, alias="EMERGENCY_THROTTLE_LIMIT", ge=1
    )

    # --- Scheduling ---
    sweep_interval_minutes: int = Field(default=5, alias="SWEEP_INTERVAL_MINUTES", ge=1, le=1440)

    # --- Logging ---
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    security_log_file: Optional[str] = Field(default=None, alias="SECURITY_LOG_FILE")
    log_stdout: bool = Field(default=True, alias="TRADEGUARD_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate bot token format."""
        if not validate_bot_token(v):
            raise ValueError("Invalid BOT_TOKEN format")
        return v

    @field_validator("admin_username")
    @classmethod
    def validate_admin_username(cls, v: str) -> str:
        """Validate admin username format; empty disables admin commands."""
        if v and not validate_username(v):
            raise ValueError("Invalid ADMIN_USERNAME format")
        return v.lstrip("@")

    @field_validator("profile")
    @classmethod
    def validate_profile(cls, v: str) -> str:
        """Validate profile name."""
        name = v.strip().lower()
        if name not in PROFILES:
            raise ValueError(f"TRADEGUARD_PROFILE must be one of: {', '.join(sorted(PROFILES))}")
        return name

    def rate_limit_config(self) -> RateLimitConfig:
        """
        Build the engine config: the selected profile with overrides applied.

        Raises:
            InvalidConfigError: If the overrides break a config invariant
                (e.g. a trading ceiling above the general ceiling)
        """
        return get_profile(self.profile).with_overrides(
            messages_per_minute=self.messages_per_minute,
            messages_per_hour=self.messages_per_hour,
            messages_per_day=self.messages_per_day,
            trading_commands_per_minute=self.trading_commands_per_minute,
            trading_commands_per_hour=self.trading_commands_per_hour,
            global_messages_per_second=self.global_messages_per_second,
            burst_limit=self.burst_limit,
            suspicious_activity_threshold=self.suspicious_activity_threshold,
            emergency_throttle_enabled=self.emergency_throttle_enabled,
            emergency_throttle_limit=self.emergency_throttle_limit,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
