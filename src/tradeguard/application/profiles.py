# src/tradeguard/application/profiles.py
"""
Configuration Profiles - Named Admission Presets

Environment presets for the admission ceilings, plus a review helper that
points out settings which weaken abuse protection.

Files that USE this module:
- tradeguard.config.settings (resolves TRADEGUARD_PROFILE)
- tradeguard.app (logs review warnings at startup)

Files that this module USES:
- tradeguard.domain.models (RateLimitConfig)
- tradeguard.domain.errors (UnknownProfileError)
"""
from __future__ import annotations

from typing import Dict, List

from tradeguard.domain.errors import UnknownProfileError
from tradeguard.domain.models import RateLimitConfig

PROFILES: Dict[str, RateLimitConfig] = {
    "development": RateLimitConfig(
        messages_per_minute=30,
        messages_per_hour=500,
        messages_per_day=2000,
        trading_commands_per_minute=10,
        trading_commands_per_hour=100,
        burst_limit=10,
        emergency_throttle_limit=5,
    ),
    "staging": RateLimitConfig(
        messages_per_minute=20,
        messages_per_hour=200,
        messages_per_day=500,
        trading_commands_per_minute=5,
        trading_commands_per_hour=20,
        burst_limit=5,
        emergency_throttle_limit=1,
    ),
    "production": RateLimitConfig(),
}

DEFAULT_PROFILE = "production"


def get_profile(name: str) -> RateLimitConfig:
    """
    Look up a named profile.

    Args:
        name: Profile name (case-insensitive)

    Returns:
        The profile's RateLimitConfig

    Raises:
        UnknownProfileError: If no profile has that name
    """
    key = (name or "").strip().lower()
    try:
        return PROFILES[key]
    except KeyError:
        raise UnknownProfileError(
            f"unknown profile {name!r}; expected one of {', '.join(sorted(PROFILES))}"
        ) from None


def review_config(config: RateLimitConfig) -> List[str]:
    """Return human-readable warnings about weak settings (empty if none)."""
    warnings = []
    if config.messages_per_minute > 60:
        warnings.append("High message rate limit may allow spam attacks")
    if config.burst_limit > config.messages_per_minute:
        warnings.append("Burst limit exceeds the per-minute limit and will never trigger first")
    if config.suspicious_activity_threshold > 5:
        warnings.append("High suspicious-activity threshold delays blocking of abusive users")
    if config.emergency_throttle_enabled:
        warnings.append("Emergency throttle is enabled at startup")
    return warnings
