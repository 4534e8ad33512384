"""
Logging setup for the monitor.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from ..models.config import LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the root logger

    Args:
        config: Level, format and optional rotating file
        verbose: Force DEBUG regardless of the configured level

    Returns:
        The root logger
    """
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else getattr(logging, str(config.level).upper(), logging.INFO)
    formatter = logging.Formatter(config.format)

    root = logging.getLogger()
    root.setLevel(level)

    # Reconfiguring replaces our previous handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if config.file:
        os.makedirs(os.path.dirname(config.file) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # ccxt is chatty at DEBUG
    logging.getLogger("ccxt").setLevel(max(level, logging.INFO))

    return root
