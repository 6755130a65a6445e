# src/tradeguard/domain/models.py
"""
Domain Models - Admission Control Objects

This module contains the objects that cross the admission engine boundary
and the records it keeps internally:
- Rate limit configuration
- Request log entries
- Per-user limit status
- Verdicts and statistics snapshots

Files that USE this module:
- tradeguard.application.* (engine, event log, counters, penalties, profiles)
- tradeguard.adapters.telegram.* (renders verdicts and stats)
- tests.* (tests build configs and inspect verdicts)

Files that this module USES:
- tradeguard.domain.errors (InvalidConfigError for config invariants)
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional

from tradeguard.domain.errors import InvalidConfigError


class ViolationType(str, Enum):
    """Reason a request was denied."""
    MESSAGES_PER_MINUTE = "messages_per_minute"
    MESSAGES_PER_HOUR = "messages_per_hour"
    MESSAGES_PER_DAY = "messages_per_day"
    TRADING_COMMANDS_MINUTE = "trading_commands_minute"
    TRADING_COMMANDS_HOUR = "trading_commands_hour"
    BURST_LIMIT = "burst_limit"
    GLOBAL_LIMIT = "global_limit"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Process-wide admission ceilings.

    Trading-command ceilings gate money-moving actions and must never be
    looser than the general message ceilings for the same window.

    Attributes:
        messages_per_minute: General messages per user per trailing minute
        messages_per_hour: General messages per user per trailing hour
        messages_per_day: General messages per user per trailing day
        trading_commands_per_minute: Trading commands per user per trailing minute
        trading_commands_per_hour: Trading commands per user per trailing hour
        global_messages_per_second: Requests admitted past the global gate per second
        max_concurrent_requests: Kept for profile parity; not enforced in-process
        burst_limit: Requests per user within a trailing 10 seconds
        suspicious_activity_threshold: Warnings before a user is blocked
        emergency_throttle_enabled: Start with the emergency throttle on
        emergency_throttle_limit: Requests per user per minute while throttled
    """
    messages_per_minute: int = 10
    messages_per_hour: int = 100
    messages_per_day: int = 500
    trading_commands_per_minute: int = 3
    trading_commands_per_hour: int = 20
    global_messages_per_second: int = 50
    max_concurrent_requests: int = 100
    burst_limit: int = 5
    suspicious_activity_threshold: int = 3
    emergency_throttle_enabled: bool = False
    emergency_throttle_limit: int = 1

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "emergency_throttle_enabled":
                if not isinstance(value, bool):
                    raise InvalidConfigError("emergency_throttle_enabled must be a boolean")
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfigError(f"{f.name} must be a positive integer, got {value!r}")

        if self.trading_commands_per_minute > self.messages_per_minute:
            raise InvalidConfigError(
                "trading_commands_per_minute must not exceed messages_per_minute "
                f"({self.trading_commands_per_minute} > {self.messages_per_minute})"
            )
        if self.trading_commands_per_hour > self.messages_per_hour:
            raise InvalidConfigError(
                "trading_commands_per_hour must not exceed messages_per_hour "
                f"({self.trading_commands_per_hour} > {self.messages_per_hour})"
            )

    def with_overrides(self, **overrides: Any) -> RateLimitConfig:
        """Return a validated copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


@dataclass(frozen=True)
class RequestLogEntry:
    """
    A single request as seen by the admission engine.

    Attributes:
        user_id: Chat user identifier
        command: Raw command text
        timestamp: Epoch seconds when the request was evaluated
        ip: Source address, when the transport provides one
        user_agent: Client identifier, when the transport provides one
        admitted: Whether the request was let through
    """
    user_id: int
    command: str
    timestamp: float
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    admitted: bool = True


@dataclass
class UserLimitStatus:
    """Per-user counters (derived from the event log) and penalty state."""
    user_id: int
    current_minute: int = 0
    current_hour: int = 0
    current_day: int = 0
    trading_commands_minute: int = 0
    trading_commands_hour: int = 0
    is_blocked: bool = False
    block_until: Optional[float] = None  # epoch seconds
    warning_count: int = 0
    suspicious_activity: bool = False


@dataclass(frozen=True)
class Verdict:
    """
    Admission decision for one request.

    remaining_requests and reset_time are only set on admitted requests.
    reset_time is in epoch milliseconds.
    """
    allowed: bool
    remaining_requests: Optional[int] = None
    reset_time: Optional[int] = None
    violation_type: Optional[ViolationType] = None
    message: Optional[str] = None

    @classmethod
    def deny(cls, violation_type: ViolationType, message: str) -> Verdict:
        return cls(allowed=False, violation_type=violation_type, message=message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"allowed": self.allowed}
        if self.remaining_requests is not None:
            data["remaining_requests"] = self.remaining_requests
        if self.reset_time is not None:
            data["reset_time"] = self.reset_time
        if self.violation_type is not None:
            data["violation_type"] = self.violation_type.value
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass(frozen=True)
class StatsSnapshot:
    """Read-only view of engine activity."""
    total_requests: int
    active_users: int
    blocked_users: int
    suspicious_ips: int
    emergency_throttle_active: bool
    requests_per_minute: int

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
