"""Logging configuration for Infralith Core."""

import logging
import sys

TAG_WIDTH = 10

LOG_FORMAT = " [%(levelname)-5s] [%(asctime)s] [%(tag)s] : %(message)s"
DEBUG_FORMAT = " [%(levelname)-5s] [%(asctime)s] [%(tag)s] %(name)s:%(lineno)d : %(message)s"


class ModuleTagFilter(logging.Filter):
    """
    Stamp each record with a fixed-width module tag.

    ``infralith.pipelines.render`` becomes ``RENDER    ``, so lines from
    the store, dispatcher and both pipelines line up in one column.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.tag = record.name.rsplit(".", 1)[-1].upper()[:TAG_WIDTH].ljust(TAG_WIDTH)
        return True


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: Add logger name and line number to every line
    """
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ModuleTagFilter())

    logging.basicConfig(
        level=log_level,
        format=DEBUG_FORMAT if debug else LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
    )

    # uvicorn follows the app level; access lines only in debug
    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(
        logging.DEBUG if debug else logging.WARNING
    )
