# src/tradeguard/app.py
"""
Application Entry Point - Bot Initialization and Startup

This module serves as the composition root for the TradeGuard bot host.
It builds the admission engine once, wires it into the Telegram application
and schedules the periodic sweep.

Limits are enforced per process. A PID file keeps a second instance from
starting on the same host; replicas on other hosts would each enforce their
own, independent limits.

Files that USE this module:
- python -m tradeguard (module entry point)
- tradeguard console script

Files that this module USES:
- tradeguard.shared.logging_conf (setup_logging for logging configuration)
- tradeguard.config (get_settings for configuration management)
- tradeguard.application.admission (AdmissionEngine)
- tradeguard.application.profiles (review_config for startup warnings)
- tradeguard.adapters.telegram.handlers (gate and admin handlers)
- tradeguard.adapters.telegram.jobs (sweep_job for scheduled housekeeping)
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from datetime import timedelta
from pathlib import Path

from telegram.error import Conflict, NetworkError, TimedOut
from telegram.ext import Application

from tradeguard.adapters.telegram.handlers import (
    ADMIN_USERNAME_KEY,
    ENGINE_KEY,
    GATE_GROUP,
    build_gate,
    build_handlers,
)
from tradeguard.adapters.telegram.jobs import sweep_job
from tradeguard.application.admission import AdmissionEngine
from tradeguard.application.profiles import review_config
from tradeguard.config import Settings, get_settings
from tradeguard.shared.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def _get_pid_file() -> Path:
    """Get PID file path from TRADEGUARD_PID_FILE or ./data/bot.pid."""
    pid_file = os.environ.get("TRADEGUARD_PID_FILE")
    if pid_file:
        return Path(pid_file)
    return Path("./data") / "bot.pid"


def _check_existing_instance() -> None:
    """
    Check if another bot instance is already running.

    Raises RuntimeError if PID file exists and process is still running.
    """
    pid_file = _get_pid_file()
    if not pid_file.exists():
        return
    try:
        old_pid = int(pid_file.read_text().strip())
    except (ValueError, OSError):
        pid_file.unlink()
        return

    try:
        os.kill(old_pid, 0)  # Signal 0 only checks that the process exists
    except ProcessLookupError:
        pid_file.unlink()
        return
    except PermissionError:
        pass  # Process exists but belongs to another user
    raise RuntimeError(
        f"Another bot instance is already running (PID: {old_pid}).\n"
        f"Admission limits are per process; stop it first with: kill {old_pid}"
    )


def _create_pid_file() -> None:
    pid_file = _get_pid_file()
    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(str(os.getpid()))


def _remove_pid_file() -> None:
    pid_file = _get_pid_file()
    if pid_file.exists():
        try:
            pid_file.unlink()
        except OSError as e:
            logger.warning("Could not remove PID file %s: %s", pid_file, e)


def build_application(settings: Settings, engine: AdmissionEngine) -> Application:
    """
    Create the Telegram application with the admission gate in front.

    Args:
        settings: Loaded settings (token, admin, sweep interval)
        engine: The process's admission engine

    Returns:
        Configured Application, not yet running
    """
    app = Application.builder().token(settings.bot_token).build()
    app.bot_data[ENGINE_KEY] = engine
    app.bot_data[ADMIN_USERNAME_KEY] = settings.admin_username

    app.add_handler(build_gate(), group=GATE_GROUP)
    for h in build_handlers():
        app.add_handler(h)

    app.job_queue.run_repeating(
        callback=sweep_job,
        interval=timedelta(minutes=settings.sweep_interval_minutes),
        first=timedelta(minutes=settings.sweep_interval_minutes),
        name="admission_sweep",
    )
    return app


def main() -> None:
    """
    Initialize and start the bot host.

    This function:
    1. Loads settings and sets up logging
    2. Acquires the single-instance PID lock
    3. Builds the admission engine from the selected profile
    4. Registers the gate, admin handlers and the sweep job
    5. Starts the bot polling loop
    """
    settings = get_settings()
    setup_logging(
        level=logging.INFO,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        security_log_file=settings.security_log_file,
        log_to_stdout=settings.log_stdout,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logger.info("Working directory: %s", os.getcwd())

    try:
        _check_existing_instance()
        _create_pid_file()
        atexit.register(_remove_pid_file)
        logger.info("Bot instance lock acquired (PID: %d)", os.getpid())
    except RuntimeError as e:
        logger.error(str(e))
        sys.exit(1)

    config = settings.rate_limit_config()
    for warning in review_config(config):
        logger.warning("Admission config: %s", warning)
    engine = AdmissionEngine(config)

    app = build_application(settings, engine)
    logger.info(
        "Starting bot polling… profile=%s, sweep every %d minutes",
        settings.profile,
        settings.sweep_interval_minutes,
    )

    try:
        app.run_polling(
            close_loop=False,
            allowed_updates=None,
            drop_pending_updates=False,
        )
    except Conflict as e:
        logger.error("Telegram Conflict error: %s; another instance is polling this bot", e)
        raise
    except (TimedOut, NetworkError) as e:
        logger.error(
            "Network error during bot operation: %s (type: %s)",
            e,
            type(e).__name__,
            exc_info=True,
        )
        raise
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (KeyboardInterrupt)")
        raise
    finally:
        _remove_pid_file()


if __name__ == "__main__":
    main()
