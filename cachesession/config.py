"""
CacheSession configuration loader.

Loads and merges configuration from files, a .env file, the process
environment and explicit overrides, then builds a validated SessionConfig.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

from .faults import ConfigFault
from .sessions.policy import SessionConfig

logger = logging.getLogger("cachesession.config")

__all__ = ["ConfigLoader", "SessionConfig"]


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults

    Environment keys are upper-case, prefixed, and use ``__`` for nesting::

        CACHESESSION_SESSIONS__SESSION_TTL=3600
        CACHESESSION_SESSIONS__COOKIE__SECURE=false
    """

    def __init__(self, env_prefix: str = "CACHESESSION_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "CACHESESSION_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Merge order (later overrides earlier):
        1. Config files, in the order given (JSON or YAML)
        2. .env file
        3. Environment variables (``env_prefix`` prefix)
        4. Manual overrides

        Args:
            paths: Config file paths
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance

        Raises:
            ConfigFault: A config file is missing or unreadable
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or []:
            loader._load_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_file(self, path: Path):
        if not path.exists():
            raise ConfigFault(f"Config file not found: {path}")

        suffix = path.suffix.lower()
        try:
            if suffix == ".json":
                self._load_json_file(path)
            elif suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigFault(f"Unsupported config file type: {path}")
        except (OSError, ValueError) as e:
            raise ConfigFault(f"Could not read {path}: {e}") from e

        logger.debug(f"Loaded config file {path}")

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigFault(f"Invalid YAML in {path}: {e}") from e
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        env_path = Path(path)
        if not env_path.exists():
            logger.debug(f"No .env file at {env_path}")
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert CACHESESSION_SESSIONS__SESSION_TTL to nested dict."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        # Boolean
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        # Number
        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        # JSON
        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        parts = path.split(".")
        current = self.config_data

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def get_session_config(self) -> SessionConfig:
        """
        Build the session configuration from the ``sessions`` section.

        Returns:
            Validated SessionConfig (defaults when the section is absent)

        Raises:
            ConfigFault: The section holds invalid values
        """
        section = self.get("sessions", {})
        if not isinstance(section, dict):
            raise ConfigFault(f"'sessions' must be a mapping, got {type(section).__name__}")
        try:
            return SessionConfig.from_dict(section)
        except (TypeError, ValueError) as e:
            raise ConfigFault(str(e)) from e

    def to_dict(self) -> dict:
        return dict(self.config_data)
