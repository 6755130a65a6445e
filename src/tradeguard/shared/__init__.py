# src/tradeguard/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Trading command classification
- Validation
- Logging configuration
"""

from tradeguard.shared.commands import TRADING_VOCABULARY, is_trading_command
from tradeguard.shared.logging_conf import SECURITY_LOGGER_NAME, setup_logging
from tradeguard.shared.validators import (
    parse_positive_number,
    parse_user_id,
    validate_bot_token,
    validate_username,
)

__all__ = [
    "TRADING_VOCABULARY",
    "is_trading_command",
    "SECURITY_LOGGER_NAME",
    "setup_logging",
    "validate_bot_token",
    "validate_username",
    "parse_user_id",
    "parse_positive_number",
]
