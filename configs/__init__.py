"""
decimal-ta Configuration Management

Loads indicator defaults and output precision from JSON files validated
against JSON Schema.
"""

import json
import logging
from typing import Dict, Any, Optional
from pathlib import Path
import jsonschema

logger = logging.getLogger(__name__)

CONFIG_FILES = {
    'indicators': ('indicators.json', 'indicators.schema.json'),
}

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent


class ConfigError(Exception):
    """Configuration file could not be parsed or failed schema validation."""

    def __init__(self, config_name: str, reason: str):
        super().__init__(f"Invalid configuration '{config_name}': {reason}")
        self.config_name = config_name
        self.reason = reason


class ConfigLoader:
    """Loads and manages library configurations."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration loader.

        Args:
            config_dir: Directory containing configuration files
                (defaults to the directory of this package)

        Raises:
            ConfigError: If a present file is malformed or fails validation
        """
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self.configs = {}
        self._load_all_configs()

    def _load_all_configs(self) -> None:
        """Load all configuration files."""
        for config_name in CONFIG_FILES:
            self.configs[config_name] = self._load(config_name)

    def _load(self, config_name: str) -> Dict[str, Any]:
        filename, schema_name = CONFIG_FILES[config_name]
        config_path = self.config_dir / filename
        if not config_path.exists():
            # Missing file means built-in defaults
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("config_parse_failed", extra={"path": str(config_path), "error": str(e)})
            raise ConfigError(config_name, str(e))

        schema_path = self.config_dir / schema_name
        if not schema_path.exists():
            schema_path = DEFAULT_CONFIG_DIR / schema_name
        if schema_path.exists():
            with open(schema_path, 'r', encoding='utf-8') as sf:
                schema = json.load(sf)
            try:
                jsonschema.validate(instance=config, schema=schema)
            except jsonschema.ValidationError as e:
                logger.error("config_validation_failed", extra={
                    "path": str(config_path),
                    "error": e.message,
                })
                raise ConfigError(config_name, e.message)

        logger.info("config_loaded", extra={"config": config_name, "path": str(config_path)})
        return config

    def get_config(self, config_name: str) -> Dict[str, Any]:
        """
        Get configuration by name.

        Args:
            config_name: Name of configuration

        Returns:
            Configuration dictionary
        """
        return self.configs.get(config_name, {})

    def get_all_configs(self) -> Dict[str, Dict[str, Any]]:
        """
        Get all configurations.

        Returns:
            Dictionary of all configurations
        """
        return self.configs.copy()

    def get_indicator_defaults(self, indicator_key: str) -> Dict[str, Any]:
        """Default overrides for one indicator (e.g. 'sma')."""
        return dict(self.get_config('indicators').get('indicators', {}).get(indicator_key, {}))

    def get_precision(self, default: int = 6) -> int:
        """Fractional digits kept in emitted values."""
        return self.get_config('indicators').get('precision', default)

    def reload_config(self, config_name: str) -> None:
        """
        Reload specific configuration.

        Args:
            config_name: Name of configuration to reload

        Raises:
            ConfigError: If the file is malformed; the prior config is kept
        """
        if config_name in CONFIG_FILES:
            self.configs[config_name] = self._load(config_name)
