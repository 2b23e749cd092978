"""
Logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this only sets up
the root handler, at application start.
"""

import logging
import sys

from relight.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configures the root logger from LOG_LEVEL. Later calls are no-ops."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stdout)
