"""Logging utilities for Mailsieve."""

import logging
import sys
from datetime import datetime

import config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Package loggers that share the application handlers
# (modules log via logging.getLogger(__name__))
PACKAGE_LOGGERS = ("core", "api", "database")


def _build_handlers(name: str):
    level = logging.getLevelName(config.LOG_LEVEL)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))

    log_file = config.LOGS_DIR / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    return [console_handler, file_handler]


def setup_logger(name: str = "mailsieve") -> logging.Logger:
    """
    Configure the application logger and the package loggers.

    Safe to call repeatedly; handlers are only attached once.

    Args:
        name: Application logger name (also names the log file)

    Returns:
        The application logger
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handlers = _build_handlers(name)
    for target in (name,) + PACKAGE_LOGGERS:
        target_logger = logging.getLogger(target)
        target_logger.setLevel(logging.DEBUG)
        for handler in handlers:
            target_logger.addHandler(handler)

    return logger


# Default logger
logger = setup_logger()


def log_email_processed(email_id: str, rule_name: str, success: bool, reason: str = None):
    """Log the outcome of processing one email."""
    status = "✓" if success else "✗"
    msg = f"{status} [{rule_name or 'no rule'}] {email_id}"
    if reason:
        msg += f" - {reason}"

    if success:
        logger.info(msg)
    else:
        logger.warning(msg)


def log_job_start(job_id: str, email_count: int):
    """Log job start."""
    logger.info(f"Job started: {job_id[:8]} - {email_count} emails")


def log_job_complete(job_id: str, success: int, failed: int, duration_s: float):
    """Log job completion."""
    logger.info(
        f"Job completed: {job_id[:8]} - "
        f"{success} success, {failed} failed, {duration_s:.1f}s"
    )
