#!/usr/bin/env python3
"""
Configuration for the CATH domain splitter

Values are layered, later layers winning:

1. DEFAULT_CONFIG
2. the configuration file (YAML, or JSON by extension)
3. a sibling <name>.local.<ext> overlay, for per-machine paths
4. CATH_<SECTION>__<KEY> environment variables

The merged result is validated against ConfigSchema.
"""
import copy
import os
import yaml
import json
import logging
from typing import Dict, Any, Optional, List

from cath.exceptions import ConfigurationError
from .schema import ConfigSchema
from .defaults import DEFAULT_CONFIG


class ConfigManager:
    """Layered configuration with dot-notation access"""

    ENV_PREFIX = "CATH_"

    def __init__(self, config_path: Optional[str] = None):
        """Load and validate configuration

        Args:
            config_path: YAML/JSON file; defaults and environment only when omitted

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        self.logger = logging.getLogger("cath.config")
        self.config_path = config_path
        self.config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        self.sources: List[str] = ['defaults']

        if config_path:
            if not os.path.exists(config_path):
                raise ConfigurationError(f"Configuration file not found: {config_path}",
                                         {'config_path': config_path})
            self._merge_file(config_path)

            local_path = self.local_config_path(config_path)
            if os.path.exists(local_path):
                self._merge_file(local_path)

        self._merge_env(os.environ)
        self._validate_config()

    @staticmethod
    def local_config_path(config_path: str) -> str:
        """config.yml -> config.local.yml in the same directory"""
        stem, ext = os.path.splitext(config_path)
        return f"{stem}.local{ext}"

    def _merge_file(self, config_path: str) -> None:
        try:
            with open(config_path, 'r') as f:
                if config_path.endswith('.json'):
                    file_config = json.load(f)
                else:
                    file_config = yaml.safe_load(f) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error loading config file {config_path}: {str(e)}",
                                     {'config_path': config_path}) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration file {config_path} must contain a mapping",
                                     {'config_path': config_path})

        self._deep_update(self.config, file_config)
        self.sources.append(config_path)
        self.logger.debug(f"Merged configuration from {config_path}")

    def _merge_env(self, environ: Dict[str, str]) -> None:
        """Apply CATH_ variables; CATH_BOUNDARIES__SOURCE sets boundaries.source"""
        used = []
        for key, value in environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue

            parts = key[len(self.ENV_PREFIX):].lower().split("__")
            current = self.config
            for part in parts[:-1]:
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]
            current[parts[-1]] = self._convert_value(value)
            used.append(key)

        if used:
            self.sources.append('environment')
            self.logger.debug(f"Environment overrides: {', '.join(sorted(used))}")

    @staticmethod
    def _convert_value(value: str) -> Any:
        """Environment strings to bool, int or float where they parse as one"""
        if value.lower() in ('true', 'yes'):
            return True
        if value.lower() in ('false', 'no'):
            return False
        for convert in (int, float):
            try:
                return convert(value)
            except ValueError:
                pass
        return value

    def _deep_update(self, target: Dict[str, Any], source: Dict[str, Any]) -> None:
        for key, value in source.items():
            if isinstance(target.get(key), dict) and isinstance(value, dict):
                self._deep_update(target[key], value)
            else:
                target[key] = value

    def _validate_config(self) -> None:
        errors = ConfigSchema.validate(self.config)
        if errors:
            for error in errors:
                self.logger.error(f"Configuration error: {error}")
            raise ConfigurationError("Invalid configuration",
                                     {'errors': errors, 'sources': list(self.sources)})

    def get(self, key: str, default: Any = None) -> Any:
        """Value for a dotted key such as 'boundaries.release', or default"""
        current: Any = self.config
        for part in key.split('.'):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def get_path(self, path_name: str, default: str = "") -> str:
        return self.config.get('paths', {}).get(path_name, default)

    def get_boundaries_config(self) -> Dict[str, Any]:
        return self.config.get('boundaries', {})

    def get_pipeline_config(self) -> Dict[str, Any]:
        return self.config.get('pipeline', {})
