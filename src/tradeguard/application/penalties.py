# src/tradeguard/application/penalties.py
"""
Penalty Registry - Blocked Users and Flagged Addresses

An unexpired entry in the block map is authoritative over every other
admission check. Entries leave the map through an explicit unblock or when the
sweep finds them expired.

Files that USE this module:
- tradeguard.application.admission (reads and updates penalties)

Files that this module USES:
- None (plain in-memory maps)
"""
from __future__ import annotations

from typing import Dict, List, Optional, Set


class PenaltyRegistry:
    """Block expiries by user and the set of suspicious IP addresses."""

    def __init__(self) -> None:
        self._blocked: Dict[int, float] = {}  # user_id -> block_until (epoch seconds)
        self._suspicious_ips: Set[str] = set()

    # --- users ---

    def block(self, user_id: int, until: float) -> None:
        self._blocked[user_id] = until

    def release(self, user_id: int) -> None:
        self._blocked.pop(user_id, None)

    def block_until(self, user_id: int) -> Optional[float]:
        return self._blocked.get(user_id)

    def is_blocked(self, user_id: int, now: float) -> bool:
        until = self._blocked.get(user_id)
        return until is not None and now < until

    def expired(self, now: float) -> List[int]:
        """Users whose block has run out but who are still in the map."""
        return [user_id for user_id, until in self._blocked.items() if now >= until]

    def active_count(self, now: float) -> int:
        return sum(1 for until in self._blocked.values() if now < until)

    # --- addresses ---

    def flag_ip(self, ip: str) -> bool:
        """Flag an address; returns True if it was not flagged before."""
        if ip in self._suspicious_ips:
            return False
        self._suspicious_ips.add(ip)
        return True

    def is_ip_flagged(self, ip: str) -> bool:
        return ip in self._suspicious_ips

    @property
    def flagged_ip_count(self) -> int:
        return len(self._suspicious_ips)
