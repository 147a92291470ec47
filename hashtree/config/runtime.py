"""
Runtime Configuration

Central configuration for hash selection, builder strategy and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from hashtree.crypto.hashing import DEFAULT_ALGORITHM, TreeHasher
from hashtree.schemas.errors import ConfigurationException, InvalidArgumentException

load_dotenv()


_TRUE_VALUES = ("1", "true", "yes", "on")
_STRATEGIES = ("materializing", "streaming")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


@dataclass
class HashConfig:
    """Configuration for the hash capability."""
    algorithm: str = DEFAULT_ALGORITHM
    leaf_algorithm: Optional[str] = None
    sort_pairs: bool = False


@dataclass
class TreeConfig:
    """Configuration for tree building."""
    strategy: str = "materializing"
    require_trailing_empty: bool = True

    def __post_init__(self):
        if self.strategy not in _STRATEGIES:
            raise ConfigurationException(
                f"Unknown builder strategy: {self.strategy!r}", key="tree.strategy"
            )


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "WARNING"
    log_file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (a .env file is honoured)
    - YAML file
    - Programmatic construction
    """
    hash: HashConfig = field(default_factory=HashConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - HASHTREE_HASH_ALGORITHM: hashlib name for internal nodes
        - HASHTREE_LEAF_HASH_ALGORITHM: hashlib name for leaves
        - HASHTREE_SORT_PAIRS: Sort operands before combining (true/false)
        - HASHTREE_STRATEGY: materializing or streaming
        - HASHTREE_REQUIRE_TRAILING_EMPTY: Validate empty-leaf placement (true/false)
        - HASHTREE_LOG_LEVEL: Log level name
        - HASHTREE_LOG_FILE: Optional log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv("HASHTREE_HASH_ALGORITHM"):
            overrides.setdefault("hash", {})["algorithm"] = os.getenv("HASHTREE_HASH_ALGORITHM")
        if os.getenv("HASHTREE_LEAF_HASH_ALGORITHM"):
            overrides.setdefault("hash", {})["leaf_algorithm"] = os.getenv("HASHTREE_LEAF_HASH_ALGORITHM")
        if os.getenv("HASHTREE_SORT_PAIRS"):
            overrides.setdefault("hash", {})["sort_pairs"] = _env_flag("HASHTREE_SORT_PAIRS", "false")

        if os.getenv("HASHTREE_STRATEGY"):
            overrides.setdefault("tree", {})["strategy"] = os.getenv("HASHTREE_STRATEGY").strip().lower()
        if os.getenv("HASHTREE_REQUIRE_TRAILING_EMPTY"):
            overrides.setdefault("tree", {})["require_trailing_empty"] = _env_flag(
                "HASHTREE_REQUIRE_TRAILING_EMPTY", "true"
            )

        if os.getenv("HASHTREE_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("HASHTREE_LOG_LEVEL")
        if os.getenv("HASHTREE_LOG_FILE"):
            overrides.setdefault("logging", {})["log_file"] = os.getenv("HASHTREE_LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        hash_data = data.get("hash", {})
        tree_data = data.get("tree", {})
        logging_data = data.get("logging", {})

        try:
            hash_config = HashConfig(**hash_data) if hash_data else HashConfig()
            tree = TreeConfig(**tree_data) if tree_data else TreeConfig()
            logging_config = LoggingConfig(**logging_data) if logging_data else LoggingConfig()
        except TypeError as e:
            raise ConfigurationException(f"Invalid configuration: {e}") from e

        return cls(
            hash=hash_config,
            tree=tree,
            logging=logging_config,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("hash", "tree", "logging"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        if "tree" in overrides:
            new_config.tree.__post_init__()

        return new_config

    def build_hasher(self) -> TreeHasher:
        """Create the TreeHasher described by this configuration."""
        try:
            return TreeHasher.from_names(
                node=self.hash.algorithm,
                leaf=self.hash.leaf_algorithm,
                sort_pairs=self.hash.sort_pairs,
            )
        except InvalidArgumentException as e:
            raise ConfigurationException(e.message, key="hash") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash": {
                "algorithm": self.hash.algorithm,
                "leaf_algorithm": self.hash.leaf_algorithm,
                "sort_pairs": self.hash.sort_pairs,
            },
            "tree": {
                "strategy": self.tree.strategy,
                "require_trailing_empty": self.tree.require_trailing_empty,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
            },
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[RuntimeConfig]) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
