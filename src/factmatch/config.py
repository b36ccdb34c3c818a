"""
Store configuration for factmatch.

Provides:
- StoreConfig dataclass with dict round-tripping
- Loading from YAML or JSON files
- Configuration validation
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from factmatch.errors import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_STORE_NAME = "default"

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class StoreConfig:
    """Configuration for a TripleStore."""
    store_name: str = DEFAULT_STORE_NAME
    clear_on_open: bool = False
    log_queries: bool = True
    max_results: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "store_name": self.store_name,
            "clear_on_open": self.clear_on_open,
            "log_queries": self.log_queries,
            "max_results": self.max_results,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreConfig":
        return cls(
            store_name=data.get("store_name", DEFAULT_STORE_NAME),
            clear_on_open=data.get("clear_on_open", False),
            log_queries=data.get("log_queries", True),
            max_results=data.get("max_results"),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML or JSON file, chosen by suffix."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix in YAML_SUFFIXES:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "StoreConfig":
        """Load configuration from file. A missing file yields the defaults."""
        path = Path(path)
        if not path.exists():
            logger.debug(f"No config at {path}, using defaults")
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            if path.suffix in YAML_SUFFIXES:
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        if not isinstance(data, dict):
            raise ConfigValidationError(f"Config file {path} must contain a mapping")

        config = cls.from_dict(data)
        validate_or_raise(config)
        logger.info(f"Loaded store config {config.store_name!r} from {path}")
        return config


def validate_config(config: StoreConfig) -> List[str]:
    """
    Validate configuration.

    Returns list of error messages (empty if valid).
    """
    errors = []

    if not isinstance(config.store_name, str) or not config.store_name.strip():
        errors.append("store_name must be a non-empty string")

    if not isinstance(config.clear_on_open, bool):
        errors.append("clear_on_open must be a boolean")

    if not isinstance(config.log_queries, bool):
        errors.append("log_queries must be a boolean")

    if config.max_results is not None:
        if isinstance(config.max_results, bool) or not isinstance(config.max_results, int):
            errors.append("max_results must be an integer")
        elif config.max_results < 1:
            errors.append("max_results must be at least 1")

    return errors


def validate_or_raise(config: StoreConfig) -> None:
    """Validate configuration, raising on errors."""
    errors = validate_config(config)
    if errors:
        raise ConfigValidationError("; ".join(errors))
