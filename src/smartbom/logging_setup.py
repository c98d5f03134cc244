"""Handler wiring for the ``smartbom`` logger hierarchy.

Library modules only call ``logging.getLogger(__name__)``.  The CLI calls
:func:`setup_logging` once per invocation: progress goes to *stderr* through
Rich so that the result table on *stdout* stays clean, and a plain text log
can be kept next to the run with ``log_file``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "smartbom"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that report every HTTP round trip at INFO.
NOISY_LOGGERS = ("LiteLLM", "httpx")


def _console_handler(console: Console | None) -> logging.Handler:
    return RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    *,
    console: Console | None = None,
) -> logging.Logger:
    """Attach handlers to the ``smartbom`` logger and return it.

    Unknown level names fall back to ``INFO``.  Calling this again replaces
    the handlers from the previous call.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    for old in logger.handlers:
        old.close()
    logger.handlers.clear()
    logger.setLevel(resolved)

    handlers = [_console_handler(console)]
    if log_file is not None:
        handlers.append(_file_handler(log_file))
    for handler in handlers:
        handler.setLevel(resolved)
        logger.addHandler(handler)

    noisy_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
    return logger
