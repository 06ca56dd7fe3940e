"""Logging configuration.

The tracer owns the terminal while it runs, so records go to a file when
one is given and only warnings reach stderr otherwise.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "proctrace"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Attach a handler to the package logger and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handler: logging.Handler
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        level = logging.DEBUG if debug else logging.INFO
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        level = logging.DEBUG if debug else logging.WARNING

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
