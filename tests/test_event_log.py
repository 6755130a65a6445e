# tests/test_event_log.py
"""
Event Log Tests - Unit Tests for Sliding-Window Counting and Retention

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tradeguard.application.event_log (EventLog)
- tradeguard.application.counters (CountersStore)
- tradeguard.domain.models (RequestLogEntry)
"""
from tradeguard.application.counters import CountersStore
from tradeguard.application.event_log import EventLog
from tradeguard.domain.models import RequestLogEntry


def entry(user_id, command, ts, ip=None, admitted=True):
    return RequestLogEntry(user_id=user_id, command=command, timestamp=ts, ip=ip, admitted=admitted)


class TestCounting:
    def test_window_is_strict_at_the_edge(self):
        log = EventLog()
        log.append(entry(1, "/a", 100.0))
        log.append(entry(1, "/b", 130.0))

        assert log.count_admitted(1, now=159.9, window=60) == 2
        assert log.count_admitted(1, now=160.0, window=60) == 1
        assert log.count_admitted(1, now=190.0, window=60) == 0

    def test_admitted_and_all_entries(self):
        log = EventLog()
        log.append(entry(1, "/buy", 10.0))
        log.append(entry(1, "/buy", 11.0, admitted=False))
        log.append(entry(1, "/status", 12.0))

        assert log.count_admitted(1, 12.0, 60) == 2
        assert log.count_admitted_trading(1, 12.0, 60) == 1
        assert log.count_trading(1, 12.0, 60) == 2
        assert log.count_identical(1, "/buy", 12.0, 60) == 2
        assert log.count_identical(1, "/BUY", 12.0, 60) == 0

    def test_unknown_user_and_ip(self):
        log = EventLog()
        assert log.count_admitted(99, 0.0, 60) == 0
        assert log.count_ip("1.2.3.4", 0.0, 60) == 0

    def test_ip_counts_cross_users(self):
        log = EventLog()
        log.append(entry(1, "/a", 1.0, ip="1.2.3.4"))
        log.append(entry(2, "/a", 2.0, ip="1.2.3.4"))
        log.append(entry(3, "/a", 3.0, ip="5.6.7.8"))
        log.append(entry(4, "/a", 4.0))

        assert log.count_ip("1.2.3.4", 4.0, 600) == 2
        assert log.count_all(4.0, 60) == 4
        assert log.active_users(4.0, 1.5) == {3, 4}


class TestPrune:
    def test_prune_drops_old_entries_and_indexes(self):
        log = EventLog()
        log.append(entry(1, "/a", 1.0, ip="1.2.3.4"))
        log.append(entry(2, "/a", 2.0, ip="1.2.3.4"))
        log.append(entry(1, "/b", 50.0))

        assert log.prune(now=12.0, max_age=10.0) == 2
        assert len(log) == 1
        assert log.count_ip("1.2.3.4", 50.0, 1000) == 0
        assert log.count_admitted(2, 50.0, 1000) == 0
        assert log.count_admitted(1, 50.0, 1000) == 1

    def test_prune_is_idempotent(self):
        log = EventLog()
        log.append(entry(1, "/a", 1.0))
        assert log.prune(now=100.0, max_age=10.0) == 1
        assert log.prune(now=100.0, max_age=10.0) == 0
        assert len(log) == 0


class TestCountersStore:
    def test_refresh_derives_counts_from_log(self):
        log = EventLog()
        counters = CountersStore(log)
        log.append(entry(1, "/buy", 0.0))
        log.append(entry(1, "/status", 3000.0))
        log.append(entry(1, "/sell", 3590.0))
        log.append(entry(1, "/sell", 3595.0, admitted=False))

        status = counters.refresh(1, now=3600.0)
        assert status.current_minute == 1
        assert status.current_hour == 2
        assert status.current_day == 3
        assert status.trading_commands_minute == 1
        assert status.trading_commands_hour == 1

    def test_snapshot_of_unknown_user(self):
        counters = CountersStore(EventLog())
        assert counters.snapshot(1) is None
        assert 1 not in counters
        counters.get_or_create(1)
        assert 1 in counters

    def test_forget_idle_keeps_logged_and_kept_users(self):
        log = EventLog()
        counters = CountersStore(log)
        log.append(entry(1, "/a", 0.0))
        for user_id in (1, 2, 3):
            counters.get_or_create(user_id)

        assert counters.forget_idle(keep=lambda user_id: user_id == 3) == 1
        assert 1 in counters
        assert 2 not in counters
        assert 3 in counters
