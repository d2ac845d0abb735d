"""
Logging setup shared by the CLI and any host that embeds the simulator.

Library modules only ever do ``log = logging.getLogger(...)``; handlers are
attached here, once, by whoever owns the process.

Console output goes through rich's RichHandler. An optional log file
captures everything at DEBUG with the pipe-separated format:

    2026-01-19 10:42:07 | DEBUG   | rv_regsim.machine | execute_line:186 | Skipped: ...
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Union
import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ['setup_logging', 'FILE_FORMAT']

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


def setup_logging(
    name: str = "rv_regsim",
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure and return the ``name`` logger.

    Calling it again for a logger that already has handlers is a no-op,
    so hosts may call it on every activation.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(level)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)

    if rich_console:
        ch = RichHandler(
            console=Console(stderr=True),
            level=console_level,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S",
        ))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s (console level %s)",
                 name, logging.getLevelName(console_level))
    return logger
