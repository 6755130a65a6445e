# src/tradeguard/shared/logging_conf.py
"""
Logging Configuration - Application and Security Logs

This module configures logging for the whole process. Besides the regular
application log it can route the security logger (abuse detections, blocks,
emergency throttle changes) to its own rotating file for human review.

Files that USE this module:
- tradeguard.app (setup_logging at startup)
- tradeguard.application.admission (SECURITY_LOGGER_NAME)

Files that this module USES:
- None (pure configuration module)
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

SECURITY_LOGGER_NAME = "tradeguard.security"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _rotating_handler(path: Path, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(
    level=logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    security_log_file: Optional[Union[str, Path]] = None,
    log_to_stdout: Optional[bool] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure application-wide logging settings.

    Can output to stdout, file, or both. Abuse detections are written by the
    security logger; with security_log_file set they are also kept in a
    separate rotating file.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file (enables file logging)
        log_dir: Optional directory for log files (log_file is ignored when set)
        security_log_file: Optional path for the security review log
        log_to_stdout: Log to stdout (defaults to TRADEGUARD_LOG_STDOUT, true)
        max_bytes: Maximum size per log file before rotation (default: 10MB)
        backup_count: Number of backup log files to keep (default: 5)
    """
    handlers = []
    log_file_path: Optional[Path] = None

    # Supervisors capture stdout anyway; allow turning it off
    if log_to_stdout is None:
        log_to_stdout = os.environ.get("TRADEGUARD_LOG_STDOUT", "true").lower() == "true"

    if log_to_stdout:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handlers.append(stdout_handler)

    if log_file or log_dir:
        log_file_path = Path(log_dir) / "tradeguard.log" if log_dir else Path(log_file)
        handlers.append(_rotating_handler(log_file_path, max_bytes, backup_count))

    if not handlers:
        handlers = [logging.StreamHandler(sys.stdout)]

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
    )

    if security_log_file:
        security_logger = logging.getLogger(SECURITY_LOGGER_NAME)
        security_logger.addHandler(
            _rotating_handler(Path(security_log_file), max_bytes, backup_count)
        )
        # Restrict review log to the bot's user
        os.chmod(security_log_file, 0o600)

    logger = logging.getLogger(__name__)
    if log_file_path:
        logger.info("Logging configured: file=%s, level=%s", log_file_path, level)
    else:
        logger.info("Logging configured: stdout, level=%s", level)
    if security_log_file:
        logger.info("Security log: %s", security_log_file)
