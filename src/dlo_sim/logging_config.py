# MIT License (see LICENSE)
"""
Logging configuration for applications and scripts using dlo_sim.

The library only creates module loggers (logging.getLogger(__name__));
handlers are installed here, on request.
"""
from __future__ import annotations
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the 'dlo_sim' logger namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG for per-step contact counts).
        log_file: Optional path to also write the log to.

    Returns:
        The configured 'dlo_sim' logger.
    """
    logger = logging.getLogger("dlo_sim")
    logger.setLevel(level)

    # Avoid duplicate output when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
