"""Application logging.

One stdout handler on the ``company_ranker`` logger; debug mode adds the
module name and line number to every record.
"""
import logging
import sys
from typing import Optional

from ..config import get_settings

LOGGER_NAME = "company_ranker"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s:%(lineno)d - %(message)s"


def setup_logging(debug: Optional[bool] = None) -> logging.Logger:
    """Configure and return the application logger.

    Calling it again only changes the level and format of the existing handler.

    Args:
        debug: Override for ``settings.debug``

    Returns:
        The application logger
    """
    if debug is None:
        debug = get_settings().debug
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(DEBUG_LOG_FORMAT if debug else LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not logger.handlers:
        logger.addHandler(logging.StreamHandler(sys.stdout))

    for handler in logger.handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger, configuring it on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        return setup_logging()
    return logger
