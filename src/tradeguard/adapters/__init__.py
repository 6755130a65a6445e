# src/tradeguard/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Telegram (admission gate, admin commands, sweep job)
- Formatting (admin report output)
"""

__all__ = []
