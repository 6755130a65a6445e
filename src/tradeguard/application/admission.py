# src/tradeguard/application/admission.py
"""
Admission Engine - Abuse Prevention for Trading Commands

This module implements the decision pipeline that every inbound bot command
passes before a handler may act on it. It combines:
- Timed user blocks and flagged IP addresses
- A process-wide emergency throttle
- A global per-second ceiling
- Per-user sliding windows (minute/hour/day) and stricter trading windows
- A 10-second burst ceiling
- Abuse-pattern detection that escalates from warnings to a timed block

The engine is synchronous and keeps all state in memory. One engine serves one
process; limits are not shared between replicas.

Files that USE this module:
- tradeguard.app (constructs the engine once and hands it to the bot)
- tradeguard.adapters.telegram.handlers (admission gate and admin commands)
- tradeguard.adapters.telegram.jobs (periodic sweep)

Files that this module USES:
- tradeguard.application.event_log (EventLog for sliding-window counts)
- tradeguard.application.counters (CountersStore for per-user status)
- tradeguard.application.penalties (PenaltyRegistry for blocks and IPs)
- tradeguard.domain.models (config, verdicts, statistics)
- tradeguard.shared.commands (is_trading_command)
- tradeguard.shared.logging_conf (SECURITY_LOGGER_NAME)
"""
from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from tradeguard.application.counters import DAY, HOUR, MINUTE, CountersStore
from tradeguard.application.event_log import EventLog
from tradeguard.application.penalties import PenaltyRegistry
from tradeguard.domain.models import (
    RateLimitConfig,
    RequestLogEntry,
    StatsSnapshot,
    UserLimitStatus,
    Verdict,
    ViolationType,
)
from tradeguard.shared.commands import is_trading_command
from tradeguard.shared.logging_conf import SECURITY_LOGGER_NAME

logger = logging.getLogger(__name__)
security_logger = logging.getLogger(SECURITY_LOGGER_NAME)

BURST_WINDOW = 10.0
GLOBAL_WINDOW = 1.0
ACTIVE_USER_WINDOW = 10 * MINUTE
HISTORY_RETENTION = DAY
AUTO_BLOCK_SECONDS = 30 * MINUTE

# Abuse patterns: (occurrences must exceed, within window seconds)
IDENTICAL_COMMAND_LIMIT, IDENTICAL_COMMAND_WINDOW = 10, 5 * MINUTE
TRADING_SPAM_LIMIT, TRADING_SPAM_WINDOW = 8, 2 * MINUTE
IP_FLOOD_LIMIT, IP_FLOOD_WINDOW = 50, 10 * MINUTE

FAIL_OPEN_MESSAGE = "Rate limiter error - request allowed by default"


def _clock_time(epoch_seconds: float) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime("%H:%M:%S UTC")


def _next_minute_ms(now: float) -> int:
    """Epoch milliseconds of the next whole minute."""
    return int(math.ceil(now / MINUTE) * MINUTE * 1000)


class AdmissionEngine:
    """
    Admit-or-deny decisions for chat commands.

    Construct one engine at process start and keep it for the life of the
    process. Tests may create as many independent engines as they like.

    Args:
        config: Admission ceilings (defaults to RateLimitConfig())
        clock: Callable returning epoch seconds (defaults to time.time)
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._events = EventLog()
        self._counters = CountersStore(self._events)
        self._penalties = PenaltyRegistry()
        self._emergency_throttle = self.config.emergency_throttle_enabled
        self._global_count = 0
        self._last_now = clock()
        self._last_global_reset = self._last_now
        logger.info(
            "Admission engine ready: %d/min, %d/h, %d/day, trading %d/min %d/h, burst %d",
            self.config.messages_per_minute,
            self.config.messages_per_hour,
            self.config.messages_per_day,
            self.config.trading_commands_per_minute,
            self.config.trading_commands_per_hour,
            self.config.burst_limit,
        )

    def _now(self) -> float:
        """Clock reading that never goes backwards, so the event log stays time-ordered."""
        now = max(self._clock(), self._last_now)
        self._last_now = now
        return now

    # ------------------------------------------------------------------
    # Hot path
    # ------------------------------------------------------------------

    def check_rate_limit(
        self,
        user_id: int,
        command: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Verdict:
        """
        Decide whether a command may run.

        Never raises. If the engine itself fails, the request is allowed and
        the failure is logged.

        Args:
            user_id: Chat user identifier
            command: Raw command text
            ip: Source address, if the transport exposes one
            user_agent: Client identifier, if the transport exposes one

        Returns:
            Verdict describing the decision
        """
        try:
            return self._evaluate(user_id, command, ip, user_agent)
        except Exception:
            logger.exception("Rate limiter error for user %s, allowing request", user_id)
            return Verdict(allowed=True, message=FAIL_OPEN_MESSAGE)

    def _evaluate(
        self,
        user_id: int,
        command: str,
        ip: Optional[str],
        user_agent: Optional[str],
    ) -> Verdict:
        now = self._now()

        block_until = self._penalties.block_until(user_id)
        if block_until is not None:
            if now < block_until:
                # Logged for IP statistics, but never re-escalated
                self._record(user_id, command, now, ip, user_agent, admitted=False)
                return Verdict.deny(
                    ViolationType.SUSPICIOUS_ACTIVITY,
                    f"⛔ You are temporarily blocked until {_clock_time(block_until)}",
                )
            self.unblock_user(user_id)

        denial = self._first_violation(user_id, command, ip, now)

        self._record(user_id, command, now, ip, user_agent, admitted=denial is None)
        status = self._counters.refresh(user_id, now)
        self._detect_suspicious_activity(user_id, command, ip, now)

        if denial is not None:
            logger.debug(
                "Denied user %s command %r: %s", user_id, command, denial.violation_type.value
            )
            return denial

        return Verdict(
            allowed=True,
            remaining_requests=max(0, self.config.messages_per_minute - status.current_minute),
            reset_time=_next_minute_ms(now),
        )

    def _first_violation(
        self, user_id: int, command: str, ip: Optional[str], now: float
    ) -> Optional[Verdict]:
        """Run the ordered checks after the block check; None means admit."""
        cfg = self.config

        if self._emergency_throttle:
            recent = self._events.count_admitted(user_id, now, MINUTE)
            if recent >= cfg.emergency_throttle_limit:
                return Verdict.deny(
                    ViolationType.MESSAGES_PER_MINUTE,
                    f"🚨 Emergency throttling active: {cfg.emergency_throttle_limit} "
                    "request per minute limit",
                )

        if now - self._last_global_reset > GLOBAL_WINDOW:
            self._global_count = 0
            self._last_global_reset = now
        if self._global_count >= cfg.global_messages_per_second:
            return Verdict.deny(
                ViolationType.GLOBAL_LIMIT,
                "🌐 System is experiencing high load. Please wait and try again.",
            )
        self._global_count += 1

        if ip and self._penalties.is_ip_flagged(ip):
            logger.warning("Request from suspicious IP %s (user %s)", ip, user_id)
            return Verdict.deny(
                ViolationType.SUSPICIOUS_ACTIVITY,
                "🚫 Your IP address has been flagged for suspicious activity",
            )

        status = self._counters.refresh(user_id, now)

        if status.current_day >= cfg.messages_per_day:
            return Verdict.deny(
                ViolationType.MESSAGES_PER_DAY,
                f"📅 Daily message limit reached ({cfg.messages_per_day}). Try again tomorrow.",
            )
        if status.current_hour >= cfg.messages_per_hour:
            return Verdict.deny(
                ViolationType.MESSAGES_PER_HOUR,
                f"⏰ Hourly message limit reached ({cfg.messages_per_hour}). Wait until next hour.",
            )
        if status.current_minute >= cfg.messages_per_minute:
            return Verdict.deny(
                ViolationType.MESSAGES_PER_MINUTE,
                f"⏱️ Too many messages per minute ({cfg.messages_per_minute}). Please slow down.",
            )

        if is_trading_command(command):
            if status.trading_commands_hour >= cfg.trading_commands_per_hour:
                return Verdict.deny(
                    ViolationType.TRADING_COMMANDS_HOUR,
                    f"💼 Trading command hourly limit reached ({cfg.trading_commands_per_hour}). "
                    "Wait until next hour.",
                )
            if status.trading_commands_minute >= cfg.trading_commands_per_minute:
                return Verdict.deny(
                    ViolationType.TRADING_COMMANDS_MINUTE,
                    f"⚡ Trading command rate limit: {cfg.trading_commands_per_minute} per minute. "
                    "Please wait.",
                )

        if self._events.count_admitted(user_id, now, BURST_WINDOW) >= cfg.burst_limit:
            return Verdict.deny(
                ViolationType.BURST_LIMIT,
                f"💥 Burst limit exceeded ({cfg.burst_limit} messages in 10 seconds). "
                "Please slow down.",
            )

        return None

    def _record(
        self,
        user_id: int,
        command: str,
        now: float,
        ip: Optional[str],
        user_agent: Optional[str],
        admitted: bool,
    ) -> None:
        self._events.append(
            RequestLogEntry(
                user_id=user_id,
                command=command,
                timestamp=now,
                ip=ip,
                user_agent=user_agent,
                admitted=admitted,
            )
        )

    # ------------------------------------------------------------------
    # Abuse detection
    # ------------------------------------------------------------------

    def _detect_suspicious_activity(
        self, user_id: int, command: str, ip: Optional[str], now: float
    ) -> None:
        """Look for abuse patterns in the log, including the request just recorded."""
        events = self._events

        identical = events.count_identical(user_id, command, now, IDENTICAL_COMMAND_WINDOW)
        if identical > IDENTICAL_COMMAND_LIMIT:
            self._escalate(user_id, ip, now, "Rapid identical commands")
        elif is_trading_command(command):
            trading = events.count_trading(user_id, now, TRADING_SPAM_WINDOW)
            if trading > TRADING_SPAM_LIMIT:
                self._escalate(user_id, ip, now, "Trading command spam")

        if ip:
            ip_requests = events.count_ip(ip, now, IP_FLOOD_WINDOW)
            if ip_requests > IP_FLOOD_LIMIT and self._penalties.flag_ip(ip):
                security_logger.warning(
                    "IP %s flagged as suspicious (%d requests in 10 minutes)", ip, ip_requests
                )

    def _escalate(self, user_id: int, ip: Optional[str], now: float, reason: str) -> None:
        status = self._counters.get_or_create(user_id)
        status.suspicious_activity = True
        status.warning_count += 1
        security_logger.warning(
            "Suspicious activity detected: user=%s reason=%s warnings=%d",
            user_id,
            reason,
            status.warning_count,
        )

        if status.warning_count < self.config.suspicious_activity_threshold:
            return

        until = now + AUTO_BLOCK_SECONDS
        self._apply_block(status, until)
        security_logger.error(
            "User %s blocked for suspicious activity until %s", user_id, _clock_time(until)
        )
        if ip and self._penalties.flag_ip(ip):
            security_logger.warning("IP %s flagged together with blocked user %s", ip, user_id)

    def _apply_block(self, status: UserLimitStatus, until: float) -> None:
        self._penalties.block(status.user_id, until)
        status.is_blocked = True
        status.block_until = until

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def block_user(self, user_id: int, duration_minutes: float, reason: str) -> None:
        """Block a user immediately, without waiting for pattern detection."""
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
        until = self._now() + duration_minutes * MINUTE
        self._apply_block(self._counters.get_or_create(user_id), until)
        security_logger.warning(
            "User %s manually blocked for %s minutes. Reason: %s", user_id, duration_minutes, reason
        )

    def unblock_user(self, user_id: int) -> None:
        """Lift a block and clear the user's warnings and suspicious flag together."""
        self._penalties.release(user_id)
        status = self._counters.get(user_id)
        if status is not None:
            status.is_blocked = False
            status.block_until = None
            status.warning_count = 0
            status.suspicious_activity = False
        logger.info("User %s unblocked", user_id)

    def enable_emergency_throttle(self, reason: str) -> None:
        self._emergency_throttle = True
        security_logger.error("Emergency throttling enabled: %s", reason)

    def disable_emergency_throttle(self) -> None:
        self._emergency_throttle = False
        security_logger.warning("Emergency throttling disabled")

    @property
    def emergency_throttle_active(self) -> bool:
        return self._emergency_throttle

    def is_blocked(self, user_id: int) -> bool:
        return self._penalties.is_blocked(user_id, self._now())

    def is_ip_suspicious(self, ip: str) -> bool:
        return self._penalties.is_ip_flagged(ip)

    def get_user_status(self, user_id: int) -> Optional[UserLimitStatus]:
        """Copy of the user's status, or None if the user was never seen."""
        status = self._counters.snapshot(user_id)
        if status is not None:
            # An expired block may not have been released yet
            status.is_blocked = self._penalties.is_blocked(user_id, self._now())
        return status

    def get_stats(self) -> StatsSnapshot:
        """Read-only snapshot of engine activity."""
        now = self._now()
        return StatsSnapshot(
            total_requests=len(self._events),
            active_users=len(self._events.active_users(now, ACTIVE_USER_WINDOW)),
            blocked_users=self._penalties.active_count(now),
            suspicious_ips=self._penalties.flagged_ip_count,
            emergency_throttle_active=self._emergency_throttle,
            requests_per_minute=self._events.count_all(now, MINUTE),
        )

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def sweep(self) -> Tuple[int, int]:
        """
        Release expired blocks, drop history older than 24 hours and forget
        users with neither history nor an active block.

        Safe to run at any interval, or to skip: every check filters by
        timestamp, so this only reclaims memory.

        Returns:
            (released_users, pruned_entries)
        """
        now = self._now()
        expired = self._penalties.expired(now)
        for user_id in expired:
            self.unblock_user(user_id)
        pruned = self._events.prune(now, HISTORY_RETENTION)
        forgotten = self._counters.forget_idle(
            lambda user_id: self._penalties.block_until(user_id) is not None
        )
        if expired or pruned or forgotten:
            logger.info(
                "Sweep released %d blocks, pruned %d log entries, forgot %d users",
                len(expired),
                pruned,
                forgotten,
            )
        return len(expired), pruned
