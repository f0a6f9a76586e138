"""
Logging utilities for the Odyssey manifester.

Provides centralized logging configuration and convenience methods
for consistent logging across the cache, geocoding and generation steps.
"""

import logging
from pathlib import Path
from typing import Optional


# Flag to track if logger has been initialized to ensure idempotency
_logger_initialized = False

# Third-party loggers that are chatty at DEBUG (HTTP connections, image plugins)
_NOISY_LOGGERS = ("urllib3", "PIL")


def initialize_logger(log_level: str = "INFO", log_file: Optional[str] = "logs/manifester.log") -> None:
    """
    Initialize the root logger.

    The console shows messages at `log_level`; the log file, when one is
    configured, always receives everything from DEBUG up.

    Args:
        log_level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file, or None/empty for console-only logging
    """
    global _logger_initialized

    if _logger_initialized:
        return

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else level)

    # Clear any existing handlers to prevent duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logger_initialized = True

    root_logger.info(f"Logger initialized with level {log_level}, file: {log_file or 'none'}")


def log_debug(message: str) -> None:
    """Log a debug message."""
    logging.getLogger().debug(message)


def log_info(message: str) -> None:
    """
    Log an info message.

    Args:
        message: Message to log
    """
    logger = logging.getLogger()
    logger.info(message)


def log_warning(message: str) -> None:
    """
    Log a warning message.

    Args:
        message: Message to log
    """
    logger = logging.getLogger()
    logger.warning(message)


def log_error(message: str) -> None:
    """
    Log an error message.

    Args:
        message: Message to log
    """
    logger = logging.getLogger()
    logger.error(message)
