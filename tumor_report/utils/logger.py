"""Logging configuration for the tumor report pipeline."""

import logging
import os
import sys

LOG_LEVEL_ENV = "TUMOR_REPORT_LOG_LEVEL"


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """
    Create a configured stdout logger.

    ``level`` falls back to the TUMOR_REPORT_LOG_LEVEL environment variable,
    then INFO.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        if level is None:
            level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
        logger.setLevel(level)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(handler)
    return logger
