"""
Logging setup for the API process and the Celery worker.

Reads LOG_LEVEL (DEBUG, INFO, WARNING, ERROR) from the environment and
installs a single stderr handler on the root logger. Modules log through
``logging.getLogger(__name__)``.
"""

import logging
import sys

from eventhub.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    level_name = (level or LOG_LEVEL).upper()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Replace handlers so repeated calls (reload, worker fork) don't duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)

    # SQL echo is too chatty below WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
