# tests/test_formatter.py
"""
Formatter Tests - Unit Tests for Admin Report Formatting

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tradeguard.adapters.formatting.formatter (format_stats, format_user_status, _fmt_until)
- tradeguard.domain.models (StatsSnapshot, UserLimitStatus)
"""
from tradeguard.adapters.formatting.formatter import _fmt_until, format_stats, format_user_status
from tradeguard.domain.models import StatsSnapshot, UserLimitStatus


class TestFormatStats:
    def test_format_stats(self):
        stats = StatsSnapshot(
            total_requests=120,
            active_users=4,
            blocked_users=1,
            suspicious_ips=2,
            emergency_throttle_active=False,
            requests_per_minute=9,
        )
        expected_lines = [
            "🛡️ Admission control",
            "— Logged requests (24h): 120",
            "— Requests in last minute: 9",
            "— Active users (10 min): 4",
            "— Blocked users: 1",
            "— Flagged IPs: 2",
            "— Emergency throttle: OFF",
        ]
        assert format_stats(stats) == "\n".join(expected_lines)

    def test_throttle_on(self):
        stats = StatsSnapshot(0, 0, 0, 0, True, 0)
        assert format_stats(stats).endswith("— Emergency throttle: 🚨 ON")


class TestFormatUserStatus:
    def test_unknown_user(self):
        assert format_user_status(None, 5) == "👤 User 5: no activity recorded"

    def test_blocked_suspicious_user(self):
        status = UserLimitStatus(
            user_id=5,
            current_minute=2,
            current_hour=10,
            current_day=30,
            trading_commands_minute=1,
            trading_commands_hour=4,
            is_blocked=True,
            block_until=0.0,
            warning_count=3,
            suspicious_activity=True,
        )
        text = format_user_status(status, 5)
        assert "— Messages: 2/min, 10/h, 30/day" in text
        assert "— Trading: 1/min, 4/h" in text
        assert "— Warnings: 3 (suspicious)" in text
        assert "— Blocked: yes, until 1970-01-01 00:00:00 UTC" in text

    def test_fmt_until_none(self):
        assert _fmt_until(None) == "—"
