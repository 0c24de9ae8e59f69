"""
Logger Setup Module
-------------------
Provides a centralized function to configure and retrieve loggers.
Ensures consistent logging format and level across the application.
Uses a singleton pattern to avoid duplicate handlers.

Log records go to stderr; stdout is reserved for the RMSE report.
"""

import logging
import sys
from typing import Union

# --- Configuration ---
LOG_LEVEL = logging.WARNING # Default console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_FORMAT = '[%(asctime)s] %(levelname)-7s [%(name)s]: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# --- Singleton Pattern for Logger Setup ---
_loggers = {}
_handler = None

def _ensure_handler() -> logging.Handler:
    """Attach the shared stderr handler to the root logger once."""
    global _handler

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        _handler.setLevel(LOG_LEVEL)

        root_logger = logging.getLogger()
        # Loggers pass everything through; the handler does the filtering.
        root_logger.setLevel(logging.DEBUG)
        root_logger.addHandler(_handler)

    return _handler

def setup_logger(name: str, level: int = logging.DEBUG) -> logging.Logger:
    """
    Get a logger instance, configuring the root handler only once.

    Args:
        name: Name of the logger (typically the module name).
        level: Logging level for this specific logger. Console output is
               filtered separately by the handler (see set_console_level).

    Returns:
        Configured logger instance.
    """
    _ensure_handler()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if name not in _loggers:
        _loggers[name] = logger

    return logger

def set_console_level(level: Union[int, str]) -> int:
    """
    Change the level of the shared stderr handler.

    Args:
        level: A logging level number or name ('DEBUG', 'warning', ...).

    Returns:
        The numeric level that was applied.

    Raises:
        ValueError: If the level name is unknown.
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric
    _ensure_handler().setLevel(level)
    return level
