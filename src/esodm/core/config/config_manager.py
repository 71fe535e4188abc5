"""Configuration manager for esodm.

Settings come from a JSON file, a config dict and environment variables,
merged per section.

Configuration hierarchy:
- mapping: Object/Document mapping settings
  - store_null_values: Write None property values instead of omitting them
- criteria: Query compilation settings
  - default_operator: default_operator on exact-match query strings
  - analyze_wildcard: analyze_wildcard on wildcard query strings

Environment variables follow the naming convention:
ESODM__<section>__<key> for nested values
Example: ESODM__MAPPING__STORE_NULL_VALUES=true
         ESODM__CRITERIA__DEFAULT_OPERATOR="or"
"""

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigManager:
    """Configuration manager for ESODM instances.

    Each ESODM instance owns its ConfigManager, so configuration state is
    never shared between instances.
    """

    ENV_PREFIX = "ESODM"
    ENV_SEPARATOR = "__"
    SECTIONS = ("mapping", "criteria")

    def __init__(self, config_path: str | None = None):
        """Initialize the configuration manager.

        Args:
            config_path: Path to JSON configuration file. If None, only
                        the config dict and environment variables are used.
        """
        self._config_path = config_path
        self._config = self.default_config()
        self._base_config: dict[str, Any] | None = None
        self._loaded = False
        logger.debug("ConfigManager instance created with config_path=%s", config_path)

    @staticmethod
    def default_config() -> dict[str, Any]:
        """Return a new default config dict each time."""
        return {
            "mapping": {"store_null_values": False},
            "criteria": {"default_operator": "and", "analyze_wildcard": True},
        }

    def load(self, config: dict[str, Any] | None = None) -> None:
        """Load configuration from JSON file, provided config and environment variables.

        Args:
            config: Optional config dict merged over the defaults.

        Priority (highest to lowest):
        1. Environment variables
        2. JSON file
        3. Provided config (if any)
        4. Default values
        """
        if self._loaded:
            logger.debug("Configuration already loaded, skipping reload")
            return

        self._config = self.default_config()

        if config is not None:
            self._merge_sections(config, source="dict")
            self._base_config = deepcopy(config)
        elif self._base_config is not None:
            self._merge_sections(self._base_config, source="dict")

        if self._config_path:
            self._load_from_json()

        self._load_from_env()

        self._loaded = True
        logger.info("Configuration loaded successfully")
        logger.debug(
            "Final config structure: mapping=%s, criteria=%s",
            self._config["mapping"],
            self._config["criteria"],
        )

    def _load_from_json(self) -> None:
        """Load configuration from JSON file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s", self._config_path)
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                json_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in config file %s: %s", self._config_path, e)
            raise ValueError(f"Invalid JSON configuration file: {e}") from e

        self._merge_sections(json_config, source="JSON")
        logger.info("Loaded configuration from JSON: %s", self._config_path)

    def _merge_sections(self, config: Any, *, source: str) -> None:
        """Validate a config object and merge its known sections into self._config."""
        if not isinstance(config, dict):
            raise ValueError(f"Configuration ({source}) must be an object")

        for section in self.SECTIONS:
            if section not in config:
                continue
            if not isinstance(config[section], dict):
                raise ValueError(f"'{section}' section must be an object")
            self._config[section].update(deepcopy(config[section]))

        unknown = set(config) - set(self.SECTIONS)
        if unknown:
            logger.warning("Ignoring unknown configuration sections (%s): %s", source, sorted(unknown))

    def _load_from_env(self) -> None:
        """Load configuration from environment variables.

        Environment variables follow the pattern:
        ESODM__<SECTION>__<KEY>__<SUBKEY>...
        """
        prefix = f"{self.ENV_PREFIX}{self.ENV_SEPARATOR}"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            key_path = env_key[len(prefix) :].split(self.ENV_SEPARATOR)

            if len(key_path) < 2:
                logger.warning("Invalid env var format (too short): %s", env_key)
                continue

            section = key_path[0].lower()
            if section not in self.SECTIONS:
                logger.warning("Invalid section in env var %s: %s", env_key, section)
                continue

            parsed_value = self._parse_env_value(env_value)
            self._set_nested_value(section, key_path[1:], parsed_value)
            logger.debug("Set from env: %s = %s", env_key, parsed_value)

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse as JSON (numbers, booleans, null, arrays, objects), fall back to string."""
        try:
            return json.loads(value)
        except (json.JSONDecodeError, ValueError):
            return value

    def _set_nested_value(self, section: str, path: list[str], value: Any) -> None:
        target = self._config[section]
        for key in path[:-1]:
            key_lower = key.lower()
            if not isinstance(target.get(key_lower), dict):
                target[key_lower] = {}
            target = target[key_lower]
        target[path[-1].lower()] = value

    def get_section_config(self, section: str, key: str | None = None, default: Any = None) -> Any:
        """Get configuration of a section.

        Args:
            section: Section name ('mapping' or 'criteria').
            key: Specific configuration key. If None, returns the entire section.
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        if not self._loaded:
            self.load()

        section_config = self._config.get(section, {})
        if key is None:
            return deepcopy(section_config)

        return section_config.get(key, default)

    def set_section_config(self, section: str, key: str, value: Any) -> None:
        """Set configuration (runtime only, not persisted).

        Raises:
            ValueError: If section is unknown.
        """
        if section not in self.SECTIONS:
            raise ValueError(f"Unknown configuration section: {section!r}")
        if not self._loaded:
            self.load()

        self._config[section][key] = value
        logger.debug("Set %s config: %s = %s", section, key, value)

    def get_all_config(self) -> dict[str, Any]:
        """Get a deep copy of the complete configuration."""
        if not self._loaded:
            self.load()

        return deepcopy(self._config)

    def reload(self) -> None:
        """Reload configuration from sources, keeping the config dict given to load()."""
        self._loaded = False
        self.load()
        logger.info("Configuration reloaded")

    @property
    def config_path(self) -> str | None:
        """Get the configuration file path."""
        return self._config_path

    @property
    def is_loaded(self) -> bool:
        """Check if configuration has been loaded."""
        return self._loaded


__all__ = ["ConfigManager"]
