# src/tradeguard/__init__.py
"""
TradeGuard - Admission Control for Trading Chat Bots

Gates inbound bot commands before they reach handlers that can place trades.
Keeps per-user sliding-window quotas, stricter quotas for trading commands,
burst and global limits, abuse-pattern detection and timed blocking.
"""

__version__ = "1.0.0"
