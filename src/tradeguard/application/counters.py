# src/tradeguard/application/counters.py
"""Per-user limit status, with counts derived from the event log."""
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Optional

from tradeguard.application.event_log import EventLog
from tradeguard.domain.models import UserLimitStatus

MINUTE = 60.0
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class CountersStore:
    """Owns one UserLimitStatus per user seen so far."""

    def __init__(self, events: EventLog) -> None:
        self._events = events
        self._statuses: Dict[int, UserLimitStatus] = {}

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._statuses

    def get_or_create(self, user_id: int) -> UserLimitStatus:
        status = self._statuses.get(user_id)
        if status is None:
            status = UserLimitStatus(user_id=user_id)
            self._statuses[user_id] = status
        return status

    def get(self, user_id: int) -> Optional[UserLimitStatus]:
        return self._statuses.get(user_id)

    def snapshot(self, user_id: int) -> Optional[UserLimitStatus]:
        """Copy of the status, so callers cannot mutate engine state."""
        status = self._statuses.get(user_id)
        return replace(status) if status is not None else None

    def forget_idle(self, keep: Callable[[int], bool]) -> int:
        """Drop statuses of users with no logged requests unless keep(user_id) says otherwise."""
        idle = [
            user_id
            for user_id in self._statuses
            if not self._events.has_user(user_id) and not keep(user_id)
        ]
        for user_id in idle:
            del self._statuses[user_id]
        return len(idle)

    def refresh(self, user_id: int, now: float) -> UserLimitStatus:
        """Recompute the user's sliding-window counts from admitted requests."""
        status = self.get_or_create(user_id)
        events = self._events
        status.current_minute = events.count_admitted(user_id, now, MINUTE)
        status.current_hour = events.count_admitted(user_id, now, HOUR)
        status.current_day = events.count_admitted(user_id, now, DAY)
        status.trading_commands_minute = events.count_admitted_trading(user_id, now, MINUTE)
        status.trading_commands_hour = events.count_admitted_trading(user_id, now, HOUR)
        return status
