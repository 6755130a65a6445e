# src/tradeguard/adapters/formatting/formatter.py
"""
Message Formatter - Admin Reports

Plain-text layouts for the admin commands: engine statistics and a single
user's limit status.

Files that USE this module:
- tradeguard.adapters.telegram.handlers (/limits and /block replies)
- tests.test_formatter (unit tests)

Files that this module USES:
- tradeguard.domain.models (StatsSnapshot, UserLimitStatus)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from tradeguard.domain.models import StatsSnapshot, UserLimitStatus


def _fmt_until(epoch_seconds: Optional[float]) -> str:
    """Format a block expiry as UTC wall time, or "—" when there is none."""
    if epoch_seconds is None:
        return "—"
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_stats(stats: StatsSnapshot) -> str:
    """
    Format an engine statistics snapshot.

    Args:
        stats: Snapshot from AdmissionEngine.get_stats()

    Returns:
        Multi-line plain text report
    """
    throttle = "🚨 ON" if stats.emergency_throttle_active else "OFF"
    return (
        "🛡️ Admission control\n"
        f"— Logged requests (24h): {stats.total_requests}\n"
        f"— Requests in last minute: {stats.requests_per_minute}\n"
        f"— Active users (10 min): {stats.active_users}\n"
        f"— Blocked users: {stats.blocked_users}\n"
        f"— Flagged IPs: {stats.suspicious_ips}\n"
        f"— Emergency throttle: {throttle}"
    )


def format_user_status(status: Optional[UserLimitStatus], user_id: int) -> str:
    """Format one user's counters and penalty state."""
    if status is None:
        return f"👤 User {user_id}: no activity recorded"
    blocked = f"yes, until {_fmt_until(status.block_until)}" if status.is_blocked else "no"
    return (
        f"👤 User {user_id}\n"
        f"— Messages: {status.current_minute}/min, {status.current_hour}/h, {status.current_day}/day\n"
        f"— Trading: {status.trading_commands_minute}/min, {status.trading_commands_hour}/h\n"
        f"— Warnings: {status.warning_count}"
        f"{' (suspicious)' if status.suspicious_activity else ''}\n"
        f"— Blocked: {blocked}"
    )
