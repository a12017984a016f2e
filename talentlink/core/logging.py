"""
Logging setup - configures the root logger once at process start.

Modules log through ``logging.getLogger(__name__)``.
"""

import logging
import sys

from talentlink.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def setup_logging(level: str = None) -> None:
    """Attach a stdout handler to the root logger. Safe to call twice."""
    global _configured
    if _configured:
        return

    level = (level or get_settings().log_level).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Silence noisy loggers
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    _configured = True
