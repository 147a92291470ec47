"""
Logging setup for applications embedding the tree engine.

Library modules only create module loggers; handlers are installed here.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hashtree.config.runtime import LoggingConfig


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(level: str | None) -> int:
    """Map a level name to its logging constant, defaulting to INFO."""
    return getattr(logging, (level or "INFO").upper(), logging.INFO)


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure root logging: stderr plus an optional log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=resolve_log_level(level),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
    )
    logging.getLogger("hashtree").setLevel(resolve_log_level(level))


def configure_from(config: "LoggingConfig") -> None:
    """Apply a LoggingConfig."""
    setup_logging(config.level, config.log_file)
