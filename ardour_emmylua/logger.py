"""
Logging configuration for the Ardour EmmyLua scraper.
"""

import logging
import sys
from typing import Optional


def setup_logger(
    name: str = "ardour_emmylua",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Called once at import and again by the CLI with the requested level;
    # only the level changes on the second call.
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    # Format: timestamp - module - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Diagnostics go to stderr, stdout stays free for usage text
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "ardour_emmylua.extractor") share the package
    logger's handlers and level; the name in each record tells which stage
    produced it.

    Args:
        module_name: Name of the module (e.g., 'extractor', 'emitter')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"ardour_emmylua.{module_name}")
