# src/tradeguard/config/__init__.py
"""
Configuration Module

Provides centralized configuration management using Pydantic Settings.
Settings are loaded on first use, so importing the package does not require
BOT_TOKEN to be set.
"""

from tradeguard.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
