"""
Standardized logging utilities.

Usage:
    from charter.logging_utils import get_logger

    logger = get_logger(__name__)
    logger.info("Validated %s", name)
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from charter.config import LOG_LEVEL

_logger_configured = False


def configure_logging(level: int | str = LOG_LEVEL, format_string: Optional[str] = None,
                      force: bool = False):
    """
    Configure the root logger once per process.

    Args:
        level: Logging level name or number (default: CHARTER_LOG_LEVEL)
        format_string: Custom format string (optional)
        force: Reconfigure even if logging was already set up
    """
    global _logger_configured

    if _logger_configured and not force:
        return

    if format_string is None:
        format_string = "[charter] %(name)s - %(levelname)s - %(message)s"

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=format_string,
        stream=sys.stderr,  # stdout is reserved for reports
        force=True,
    )

    _logger_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring logging on first use."""
    configure_logging()
    return logging.getLogger(name)
