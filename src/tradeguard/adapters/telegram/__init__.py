# src/tradeguard/adapters/telegram/__init__.py
"""
Telegram Adapters - Bot Interface

This package contains Telegram bot adapters:
- Admission gate and admin command handlers
- Scheduled sweep job
"""

from tradeguard.adapters.telegram.handlers import (
    ADMIN_USERNAME_KEY,
    ENGINE_KEY,
    GATE_GROUP,
    build_gate,
    build_handlers,
)
from tradeguard.adapters.telegram.jobs import sweep_job

__all__ = [
    "ADMIN_USERNAME_KEY",
    "ENGINE_KEY",
    "GATE_GROUP",
    "build_gate",
    "build_handlers",
    "sweep_job",
]
