"""
releasetag.logging_utils — console logging for the release CLI.

One-liner initialization:

    log = init_logger(level="DEBUG" if verbose else "INFO")

• Rich (color) console when stdout is a TTY, plain "time | level | name | msg"
  lines otherwise (CI logs, pipes, test runners).
• Module loggers come from get_logger(__name__) and inherit the handlers
  through normal propagation to the ``releasetag`` logger.
• success() prints the green completion lines of a release.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

LOGGER_NAME = "releasetag"

_CONSOLE = Console(highlight=False)


def _is_tty(stream: Any) -> bool:
    try:
        return bool(stream.isatty())
    except Exception:
        return False


def _fmt_plain() -> logging.Formatter:
    # timestamp | level | name | message
    return logging.Formatter(fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S")


def init_logger(level: str = "INFO", *, rich: bool = True) -> logging.Logger:
    """
    Configure the ``releasetag`` logger and return it.

    Handlers installed by an earlier call are replaced, so the CLI can be
    invoked repeatedly in one process (tests) without duplicate output or
    handlers bound to a stale stdout.
    """
    logger = logging.getLogger(LOGGER_NAME)
    lvl = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(lvl)

    for h in list(logger.handlers):
        logger.removeHandler(h)

    if rich and _is_tty(sys.stdout):
        handler: logging.Handler = RichHandler(
            console=_CONSOLE, show_time=False, show_level=True, show_path=False, markup=False
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_fmt_plain())
    handler.setLevel(lvl)
    logger.addHandler(handler)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``releasetag`` or one of its children."""
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def success(message: str) -> None:
    _CONSOLE.print(f"[bold green]\\[SUCCESS][/] {escape(message)}")
