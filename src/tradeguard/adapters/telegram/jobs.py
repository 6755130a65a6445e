# src/tradeguard/adapters/telegram/jobs.py
"""
Telegram Jobs - Scheduled Housekeeping

Runs the admission engine's sweep on the bot's JobQueue. The job shares the
asyncio loop with the update handlers, so it never overlaps an admission
check.

Files that USE this module:
- tradeguard.app (sweep_job is registered as a repeating job)

Files that this module USES:
- tradeguard.adapters.telegram.handlers (ENGINE_KEY for bot_data lookup)
"""
from __future__ import annotations

import logging

from telegram.ext import ContextTypes

from tradeguard.adapters.telegram.handlers import ENGINE_KEY

logger = logging.getLogger(__name__)


async def sweep_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Release expired blocks and drop request history older than a day."""
    engine = context.bot_data.get(ENGINE_KEY)
    if engine is None:
        logger.error("Sweep skipped: admission engine not registered in bot_data")
        return

    released, pruned = engine.sweep()
    stats = engine.get_stats()
    logger.debug(
        "Sweep done: released=%d pruned=%d logged=%d blocked=%d",
        released,
        pruned,
        stats.total_requests,
        stats.blocked_users,
    )
