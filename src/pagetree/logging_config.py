"""Logging setup for the pagetree CLI and library callers."""

import sys
from pathlib import Path

from loguru import logger

from pagetree.config import LOG_FILE_FORMAT, LOG_FORMAT


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> None:
    """Route loguru output to stderr, and to ``log_file`` when given.

    Tree writes (inserts, moves, partial failures) log at INFO and above, so
    the file sink keeps an audit trail even without ``verbose``.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=LOG_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level="INFO", format=LOG_FILE_FORMAT)
