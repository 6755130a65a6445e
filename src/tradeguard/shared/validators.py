# src/tradeguard/shared/validators.py
"""
Input Validation Utilities - Settings and Admin Command Arguments

Validates the bot token and admin username from the environment and parses
the numeric arguments of admin commands (/block 12345 30).

Files that USE this module:
- tradeguard.config.settings (field validators)
- tradeguard.adapters.telegram.handlers (admin command arguments)

Files that this module USES:
- None (pure utility functions)
"""
import re
from typing import Optional


def validate_bot_token(token: str) -> bool:
    """
    Validate Telegram bot token format.

    Args:
        token: Bot token to validate

    Returns:
        True if valid, False otherwise
    """
    if not token:
        return False

    # Bot tokens look like: 123456789:ABCDEFghijklmnopQRSTUVwxyz
    pattern = r'^\d{8,10}:[A-Za-z0-9_-]{35}$'
    return bool(re.match(pattern, token))


def validate_username(username: str) -> bool:
    """
    Validate Telegram username format (5-32 letters, digits or underscores).

    A leading @ is accepted.
    """
    if not username:
        return False
    clean_username = username.lstrip('@')
    return bool(re.match(r'^[a-zA-Z0-9_]{5,32}$', clean_username))


def parse_user_id(value: str) -> Optional[int]:
    """Parse a positive Telegram user ID, or return None."""
    if not value or not re.match(r'^\d{1,15}$', value.strip()):
        return None
    user_id = int(value.strip())
    return user_id if user_id > 0 else None


def parse_positive_number(value: str, max_val: Optional[float] = None) -> Optional[float]:
    """
    Parse a positive number such as a block duration in minutes.

    Args:
        value: String value to parse
        max_val: Maximum allowed value

    Returns:
        The number, or None if the input is not a positive number within range
    """
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if number != number or number <= 0:  # NaN or non-positive
        return None
    if max_val is not None and number > max_val:
        return None
    return number
