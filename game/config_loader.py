"""Configuration loader for server settings."""
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 10015,
        "websocket_port": None,
        "mode": "pairs",
    },
    "logging": {
        "level": "INFO",
    },
}


class ConfigLoader:
    """Loads server_settings.json and layers it over the built-in defaults."""

    _config_dir = "config"
    _filename = "server_settings.json"

    def __init__(self, config_dir: Optional[str] = None):
        if config_dir is not None:
            self._config_dir = config_dir
        self.settings = _merge(DEFAULTS, self._load_json(self._filename))

    def _load_json(self, filename: str) -> Dict[str, Any]:
        """Load a JSON configuration file."""
        filepath = os.path.join(self._config_dir, filename)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning("Config file %s not found. Using defaults.", filepath)
            return {}
        except json.JSONDecodeError as e:
            logger.warning("Error parsing %s: %s. Using defaults.", filepath, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Config file %s is not a JSON object. Using defaults.", filepath)
            return {}
        return data

    def get(self, *keys, default=None):
        """Get a nested configuration value."""
        value = self.settings
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged
