"""
Logging setup for zoom.

Library modules log through logging.getLogger(__name__), below the
dedicated "zoom" logger. Applications call setup_logging once to send
those records to the console and, optionally, a file.
"""

import logging
import os
from typing import Optional

LOGGER_NAME = "zoom"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level="INFO", fmt: str = DEFAULT_FORMAT,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the "zoom" logger (not the root logger).

    Args:
        level: Logging level name or number
        fmt: Record format
        log_file: Path of an additional log file (optional)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(fmt)

    # Clear existing handlers to avoid duplication if called again
    if logger.hasHandlers():
        logger.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized. Log file: %s", log_file)
    return logger


logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())
