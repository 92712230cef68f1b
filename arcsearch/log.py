"""
arcsearch/log.py -- Logging setup for hosts embedding the data layer.

Library modules only ever call ``logging.getLogger(__name__)``; the host
application decides where records go.  ``setup_logging`` gives scripts
and notebooks the same console format the rest of the project uses.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging for console output."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    # aiohttp is chatty at DEBUG; keep it at WARNING unless asked otherwise
    logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))
