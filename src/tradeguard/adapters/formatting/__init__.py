# src/tradeguard/adapters/formatting/__init__.py
"""
Formatting Adapters - Message Formatting

This package contains message formatting adapters for Telegram output.
"""

from tradeguard.adapters.formatting.formatter import format_stats, format_user_status

__all__ = [
    "format_stats",
    "format_user_status",
]
