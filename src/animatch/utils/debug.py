"""Logging helpers for AniMatch.

All modules log through the ``animatch`` logger (or a child of it obtained via
:func:`get_logger`). Debug output is switched on by ``ANIMATCH_DEBUG=1`` or at
runtime with :func:`set_debug` (the CLI ``--debug`` flag).
"""

import logging
import os
import sys
from typing import Optional

DEBUG_ON = os.getenv("ANIMATCH_DEBUG", "0") == "1"

_ROOT_NAME = "animatch"
_logger: Optional[logging.Logger] = None


def setup_logger() -> logging.Logger:
    """Configure (once) and return the root ``animatch`` logger."""
    global _logger
    if _logger is not None:
        return _logger
    logger = logging.getLogger(_ROOT_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(asctime)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if DEBUG_ON else logging.INFO)
    _logger = logger
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the root logger or a ``animatch.<name>`` child of it."""
    root = setup_logger()
    if not name:
        return root
    if name.startswith(_ROOT_NAME + "."):
        name = name[len(_ROOT_NAME) + 1 :]
    return root.getChild(name)


def set_debug(enabled: bool) -> None:
    """Toggle debug output for the remainder of the process."""
    global DEBUG_ON
    DEBUG_ON = enabled
    setup_logger().setLevel(logging.DEBUG if enabled else logging.INFO)


def debug(msg: str) -> None:
    """Log a debug message when debugging is enabled."""
    if DEBUG_ON:
        setup_logger().debug(msg)


def info(msg: str) -> None:
    """Log an info message."""
    setup_logger().info(msg)


def warn(msg: str) -> None:
    """Log a warning message."""
    setup_logger().warning(msg)


def error(msg: str) -> None:
    """Log an error message."""
    setup_logger().error(msg)
