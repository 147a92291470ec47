"""
Runtime Configuration Module

Provides configuration loading and logging setup.
"""

from .runtime import (
    RuntimeConfig,
    HashConfig,
    TreeConfig,
    LoggingConfig,
    get_default_config,
    set_default_config,
)
from .logging_config import setup_logging, configure_from, resolve_log_level

__all__ = [
    "RuntimeConfig",
    "HashConfig",
    "TreeConfig",
    "LoggingConfig",
    "get_default_config",
    "set_default_config",
    "setup_logging",
    "configure_from",
    "resolve_log_level",
]
