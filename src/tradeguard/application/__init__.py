# src/tradeguard/application/__init__.py
"""
Application Layer - Admission Engine and its State Stores

This package contains the admission engine and the in-memory stores it owns.
No I/O dependencies; the Telegram adapter drives it.
"""

from tradeguard.application.admission import AdmissionEngine
from tradeguard.application.counters import CountersStore
from tradeguard.application.event_log import EventLog
from tradeguard.application.penalties import PenaltyRegistry
from tradeguard.application.profiles import PROFILES, get_profile, review_config

__all__ = [
    "AdmissionEngine",
    "CountersStore",
    "EventLog",
    "PenaltyRegistry",
    "PROFILES",
    "get_profile",
    "review_config",
]
