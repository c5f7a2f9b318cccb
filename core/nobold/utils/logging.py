"""
Logging configuration for nobold.
Logs go to stderr at WARNING; manage-models --verbose lowers the level to DEBUG.
"""

import logging
import sys


def setup_logging(level: int = logging.WARNING) -> logging.Logger:
    """Configure and return the application logger."""
    logger = logging.getLogger("nobold")
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


logger = setup_logging()
