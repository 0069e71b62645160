"""Logging configuration for the command-line tool."""

from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "CFSPEEDTEST_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def resolve_level(level: Optional[str] = None) -> int:
    """Level from *level*, else ``$CFSPEEDTEST_LOG_LEVEL``, else WARNING.

    Unknown names fall back to WARNING.
    """
    name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def configure_logging(level: Optional[str] = None) -> None:
    """Send all records to stderr through rich, replacing existing handlers.

    stdout is left alone so ``--json`` output stays machine-readable.
    """
    logging.basicConfig(
        level=resolve_level(level),
        format="%(name)s - %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger(__name__).debug(
        "Logging configured: level=%s", logging.getLevelName(resolve_level(level))
    )
