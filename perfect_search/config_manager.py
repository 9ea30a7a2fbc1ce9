"""
YAML loading for perfect.yaml.

Settings that differ per machine (checkpoint location, log file, bell)
belong in perfect.local.yaml next to the base file; its values are merged
over the base values key by key.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


class ConfigManager:
    """Reads a base YAML file plus its optional .local.yaml override."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.ConfigManager")

    def load_config(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load config_path and merge <stem>.local.yaml from the same directory.

        A local file that cannot be read or parsed is logged and skipped, so
        a broken override never stops a run the base file would allow.

        Raises:
            FileNotFoundError: If the base file doesn't exist
            yaml.YAMLError: If the base file is not valid YAML
            ValueError: If the base file does not hold a mapping
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self.logger.debug(f"Loading configuration from {config_file}")
        config = self._read_yaml(config_file) or {}

        local_file = config_file.parent / f"{config_file.stem}.local.yaml"
        if not local_file.exists():
            return config

        try:
            overrides = self._read_yaml(local_file)
        except (yaml.YAMLError, ValueError, OSError) as e:
            self.logger.error(f"Ignoring local configuration {local_file}: {e}")
            return config

        if overrides:
            self.logger.info(f"Applying local configuration overrides from {local_file}")
            config = self.deep_merge(config, overrides)
        return config

    def _read_yaml(self, path: Path) -> Optional[Dict[str, Any]]:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if data is not None and not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")
        return data

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Return a new dict with override merged into base.

        Nested sections merge recursively; any other override value replaces
        the base value. Neither input is modified.

        Example:
            >>> ConfigManager().deep_merge({'search': {'bell': True, 'max_hi_power': 20}},
            ...                            {'search': {'bell': False}})
            {'search': {'bell': False, 'max_hi_power': 20}}
        """
        result = base.copy()
        for key, value in override.items():
            if isinstance(result.get(key), dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = value
        return result
