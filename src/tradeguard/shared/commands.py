# src/tradeguard/shared/commands.py
"""
Command Classification - Trading Vocabulary

Decides whether a command text is a trading command. Trading commands are
subject to the stricter trading quotas and to trading-spam detection.

Files that USE this module:
- tradeguard.application.event_log (counts trading entries)
- tradeguard.application.admission (selects trading quotas)

Files that this module USES:
- None (pure utility implementation)
"""
from typing import Tuple

TRADING_VOCABULARY: Tuple[str, ...] = (
    "buy",
    "sell",
    "trade",
    "execute",
    "stop",
    "cancel",
    "order",
    "position",
)


def is_trading_command(command: str) -> bool:
    """
    Check whether a command touches trading.

    Matching is case-insensitive containment, so "/BUY BTC", "stoploss" and
    "positions" all count.

    Args:
        command: Raw command text

    Returns:
        True if any trading vocabulary word occurs in the command
    """
    if not command:
        return False
    lowered = command.lower()
    return any(word in lowered for word in TRADING_VOCABULARY)
