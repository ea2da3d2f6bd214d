"""
Logging setup for the tape machine tools.

Console output goes through rich's RichHandler. A plain-text file
handler is added when a log file is requested; it always captures
DEBUG and up so traces can be kept without flooding the terminal.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console as RichConsole
from rich.logging import RichHandler


LOGGER_NAME = "bf_machine"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """Configure and return the package logger.

    Safe to call more than once: existing handlers are replaced so a
    second call (e.g. from tests) does not duplicate output.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if log_file else console_level)

    # ── Console: stderr, so program output on stdout stays clean ──
    ch = RichHandler(
        level=console_level,
        console=RichConsole(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    # ── File: everything ──
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(fh)
        logger.debug("Log file: %s", log_path)

    return logger
