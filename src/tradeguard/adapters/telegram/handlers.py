# src/tradeguard/adapters/telegram/handlers.py
"""
Telegram Handlers - Admission Gate and Admin Commands

This module puts the admission engine in front of every bot update and maps
the engine's administrative operations onto admin-only commands:
- admission_gate: runs before all other handlers (group -1) and stops
  denied updates from reaching command handlers
- /block <user_id> <minutes> [reason], /unblock <user_id>
- /throttle_on [reason], /throttle_off
- /limits [user_id]

The engine and the admin username live in application.bot_data, put there
by tradeguard.app.

Files that USE this module:
- tradeguard.app (build_gate and build_handlers)

Files that this module USES:
- tradeguard.application.admission (AdmissionEngine)
- tradeguard.adapters.formatting.formatter (admin report text)
- tradeguard.shared.validators (admin argument parsing)
"""
from __future__ import annotations

import logging
from typing import List, Optional

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import (
    ApplicationHandlerStop,
    BaseHandler,
    CommandHandler,
    ContextTypes,
    TypeHandler,
)

from tradeguard.adapters.formatting.formatter import format_stats, format_user_status
from tradeguard.application.admission import AdmissionEngine
from tradeguard.shared.validators import parse_positive_number, parse_user_id

ENGINE_KEY = "admission_engine"
ADMIN_USERNAME_KEY = "admin_username"
GATE_GROUP = -1
MAX_BLOCK_MINUTES = 7 * 24 * 60

ADMIN_ONLY = "⚠️ This command is only available to the admin."

logger = logging.getLogger(__name__)


def _engine(context: ContextTypes.DEFAULT_TYPE) -> AdmissionEngine:
    return context.bot_data[ENGINE_KEY]


def _is_admin(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """
    Check if the user sending the update is the configured admin.

    Returns:
        True if the username matches ADMIN_USERNAME; False when no admin is configured
    """
    admin = (context.bot_data.get(ADMIN_USERNAME_KEY) or "").lstrip("@").lower()
    user = update.effective_user
    if not admin or user is None:
        return False
    return (user.username or "").lstrip("@").lower() == admin


def _command_text(update: Update) -> str:
    """Text the engine classifies: message text, caption, or callback data."""
    if update.callback_query is not None:
        return update.callback_query.data or ""
    message = update.effective_message
    if message is None:
        return ""
    return message.text or message.caption or ""


async def _reply(update: Update, text: str) -> None:
    message = update.effective_message
    if message is None:
        return
    try:
        await message.reply_text(text)
    except TelegramError as e:
        logger.warning("Failed to reply to user %s: %s", update.effective_user.id, e)


# --- Admission gate ---
async def admission_gate(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Check every update against the admission engine before any handler runs.

    Denied updates get the verdict message and stop propagating. The admin is
    exempt so that incident-response commands keep working under throttling.
    """
    user = update.effective_user
    if user is None or _is_admin(update, context):
        return

    verdict = _engine(context).check_rate_limit(user.id, _command_text(update))
    if verdict.allowed:
        if verdict.message:
            logger.warning("Admitted user %s with diagnostic: %s", user.id, verdict.message)
        return

    if verdict.message:
        await _reply(update, verdict.message)
    raise ApplicationHandlerStop


# --- /block <user_id> <minutes> [reason] ---
async def block_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_admin(update, context):
        await _reply(update, ADMIN_ONLY)
        return

    args = context.args or []
    user_id = parse_user_id(args[0]) if args else None
    minutes = parse_positive_number(args[1], max_val=MAX_BLOCK_MINUTES) if len(args) > 1 else None
    if user_id is None or minutes is None:
        await _reply(update, "Usage: /block <user_id> <minutes> [reason]")
        return

    reason = " ".join(args[2:]) or f"manual block by @{update.effective_user.username}"
    engine = _engine(context)
    engine.block_user(user_id, minutes, reason)
    await _reply(update, "🚫 Blocked.\n" + format_user_status(engine.get_user_status(user_id), user_id))


# --- /unblock <user_id> ---
async def unblock_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_admin(update, context):
        await _reply(update, ADMIN_ONLY)
        return

    args = context.args or []
    user_id = parse_user_id(args[0]) if args else None
    if user_id is None:
        await _reply(update, "Usage: /unblock <user_id>")
        return

    _engine(context).unblock_user(user_id)
    await _reply(update, f"✅ User {user_id} unblocked.")


# --- /throttle_on [reason], /throttle_off ---
async def throttle_on_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_admin(update, context):
        await _reply(update, ADMIN_ONLY)
        return

    reason = " ".join(context.args or []) or f"enabled by @{update.effective_user.username}"
    engine = _engine(context)
    engine.enable_emergency_throttle(reason)
    await _reply(
        update,
        f"🚨 Emergency throttle ON: {engine.config.emergency_throttle_limit} request(s) per minute per user.",
    )


async def throttle_off_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_admin(update, context):
        await _reply(update, ADMIN_ONLY)
        return

    _engine(context).disable_emergency_throttle()
    await _reply(update, "✅ Emergency throttle OFF.")


# --- /limits [user_id] ---
async def limits_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not _is_admin(update, context):
        await _reply(update, ADMIN_ONLY)
        return

    engine = _engine(context)
    args = context.args or []
    user_id: Optional[int] = parse_user_id(args[0]) if args else None
    if args and user_id is None:
        await _reply(update, "Usage: /limits [user_id]")
        return

    if user_id is None:
        await _reply(update, format_stats(engine.get_stats()))
    else:
        await _reply(update, format_user_status(engine.get_user_status(user_id), user_id))


def build_gate() -> TypeHandler:
    """Handler to register in GATE_GROUP so it sees every update first."""
    return TypeHandler(Update, admission_gate)


def build_handlers() -> List[BaseHandler]:
    """
    Build and return the admin command handlers.

    Returns:
        List of handler instances for registration with bot
    """
    return [
        CommandHandler("block", block_cmd),
        CommandHandler("unblock", unblock_cmd),
        CommandHandler("throttle_on", throttle_on_cmd),
        CommandHandler("throttle_off", throttle_off_cmd),
        CommandHandler("limits", limits_cmd),
    ]
