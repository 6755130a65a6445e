# src/tradeguard/application/event_log.py
"""
Event Log - Time-ordered Request Records

Keeps every request the admission engine evaluates and answers sliding-window
questions about them ("how many requests did user 42 make in the last 60
seconds?"). Entries are appended in time order (the engine's clock never
goes backwards), so every count walks its
index from the newest entry backwards and stops at the first entry outside
the window.

Files that USE this module:
- tradeguard.application.admission (records requests, counts windows)
- tradeguard.application.counters (recomputes per-user counters)

Files that this module USES:
- tradeguard.domain.models (RequestLogEntry)
- tradeguard.shared.commands (is_trading_command)
"""
from __future__ import annotations

from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Iterable, Optional, Set

from tradeguard.domain.models import RequestLogEntry
from tradeguard.shared.commands import is_trading_command

EntryFilter = Callable[[RequestLogEntry], bool]


def _count_recent(
    entries: Iterable[RequestLogEntry],
    now: float,
    window: float,
    predicate: Optional[EntryFilter] = None,
) -> int:
    """Count entries newer than now - window, newest first."""
    count = 0
    for entry in entries:
        if now - entry.timestamp >= window:
            break
        if predicate is None or predicate(entry):
            count += 1
    return count


def _admitted(entry: RequestLogEntry) -> bool:
    return entry.admitted


def _admitted_trading(entry: RequestLogEntry) -> bool:
    return entry.admitted and is_trading_command(entry.command)


class EventLog:
    """In-memory request history with per-user and per-IP indexes."""

    def __init__(self) -> None:
        self._entries: Deque[RequestLogEntry] = deque()
        self._by_user: Dict[int, Deque[RequestLogEntry]] = defaultdict(deque)
        self._by_ip: Dict[str, Deque[RequestLogEntry]] = defaultdict(deque)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: RequestLogEntry) -> None:
        self._entries.append(entry)
        self._by_user[entry.user_id].append(entry)
        if entry.ip:
            self._by_ip[entry.ip].append(entry)

    def has_user(self, user_id: int) -> bool:
        return user_id in self._by_user

    def _user_entries(self, user_id: int) -> Iterable[RequestLogEntry]:
        entries = self._by_user.get(user_id)
        return reversed(entries) if entries else ()

    # --- per-user windows ---

    def count_admitted(self, user_id: int, now: float, window: float) -> int:
        """Admitted requests from a user in the trailing window."""
        return _count_recent(self._user_entries(user_id), now, window, _admitted)

    def count_admitted_trading(self, user_id: int, now: float, window: float) -> int:
        """Admitted trading commands from a user in the trailing window."""
        return _count_recent(self._user_entries(user_id), now, window, _admitted_trading)

    def count_identical(self, user_id: int, command: str, now: float, window: float) -> int:
        """Requests (admitted or not) from a user with exactly this command text."""
        return _count_recent(
            self._user_entries(user_id), now, window, lambda e: e.command == command
        )

    def count_trading(self, user_id: int, now: float, window: float) -> int:
        """Trading commands (admitted or not) from a user in the trailing window."""
        return _count_recent(
            self._user_entries(user_id), now, window, lambda e: is_trading_command(e.command)
        )

    # --- cross-user windows ---

    def count_ip(self, ip: str, now: float, window: float) -> int:
        """Requests from an address in the trailing window, across all users."""
        entries = self._by_ip.get(ip)
        if not entries:
            return 0
        return _count_recent(reversed(entries), now, window)

    def count_all(self, now: float, window: float) -> int:
        return _count_recent(reversed(self._entries), now, window)

    def active_users(self, now: float, window: float) -> Set[int]:
        users: Set[int] = set()
        for entry in reversed(self._entries):
            if now - entry.timestamp >= window:
                break
            users.add(entry.user_id)
        return users

    # --- retention ---

    def prune(self, now: float, max_age: float) -> int:
        """
        Drop entries older than max_age seconds.

        Args:
            now: Current epoch seconds
            max_age: Retention in seconds

        Returns:
            Number of entries removed
        """
        removed = 0
        cutoff = now - max_age
        while self._entries and self._entries[0].timestamp <= cutoff:
            entry = self._entries.popleft()
            removed += 1
            self._drop_indexed(self._by_user, entry.user_id, entry)
            if entry.ip:
                self._drop_indexed(self._by_ip, entry.ip, entry)
        return removed

    @staticmethod
    def _drop_indexed(index: Dict, key, entry: RequestLogEntry) -> None:
        # Index deques are time-ordered subsequences of the main log, so the
        # entry being pruned is always at the left end.
        bucket = index.get(key)
        if bucket and bucket[0] is entry:
            bucket.popleft()
        if bucket is not None and not bucket:
            del index[key]
