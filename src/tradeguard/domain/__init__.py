# src/tradeguard/domain/__init__.py
"""
Domain Layer - Pure Admission Control Objects

This package contains domain models and errors.
No dependencies on infrastructure or external systems.
"""

from tradeguard.domain.models import (
    RateLimitConfig,
    RequestLogEntry,
    StatsSnapshot,
    UserLimitStatus,
    Verdict,
    ViolationType,
)
from tradeguard.domain.errors import (
    DomainError,
    InvalidConfigError,
    UnknownProfileError,
)

__all__ = [
    "RateLimitConfig",
    "RequestLogEntry",
    "UserLimitStatus",
    "Verdict",
    "ViolationType",
    "StatsSnapshot",
    "DomainError",
    "InvalidConfigError",
    "UnknownProfileError",
]
