"""Root logger setup for the tagrecon CLI."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send log records to stderr so query rows on stdout stay machine readable.

    ``force=True`` replaces existing handlers, which ``--verbose`` relies on to
    lower the level after the default setup already ran.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    # httpx logs every request at INFO; page progress is logged by the catalog client
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
