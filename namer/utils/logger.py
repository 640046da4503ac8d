"""
Logging configuration for the naming assistant.

All modules log through children of the ``namer`` logger, so one stdout
handler (level from ``LOG_LEVEL``) covers the whole service.
"""
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("namer")


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach the stdout handler to the ``namer`` logger (once) and set its level.

    Args:
        level: Level name such as "DEBUG". Falls back to LOG_LEVEL.

    Returns:
        The package root logger
    """
    level = (level or LOG_LEVEL).upper()
    logger.setLevel(level)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    # Prevent propagation to root logger (avoid duplicate logs)
    logger.propagate = False
    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (will be appended to 'namer')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"namer.{name}")
    return logger


def log_event(log: logging.Logger, event: str, payload: Dict[str, Any]) -> None:
    """Emit one structured event as a single JSON line at INFO level."""
    log.info(f"{event} {json.dumps(payload, ensure_ascii=False, default=str)}")


setup_logging()
