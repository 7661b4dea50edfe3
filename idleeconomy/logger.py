"""Logging setup for the economy services."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def init_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Configure root logging once and return the package logger.

    Output goes to stderr so stdout stays free for the MCP stdio transport.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    package_logger = logging.getLogger("idleeconomy")
    package_logger.setLevel(level)
    return package_logger

