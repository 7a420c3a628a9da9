# utils/logging_utils.py
"""
Logging configuration for the application
"""
import logging

from config.settings import LOG_LEVEL


def setup_logging(level=LOG_LEVEL):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)
    return logger
