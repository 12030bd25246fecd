"""
Logging setup for the plugin info service and its command line tools.
"""

import logging
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """
    Configure root logging once per process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        fmt: Log record format, defaults to DEFAULT_FORMAT
    """
    logging.basicConfig(level=level.upper(), format=fmt or DEFAULT_FORMAT, force=True)

    # SQLAlchemy engine chatter is controlled by database_echo, not the app level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
