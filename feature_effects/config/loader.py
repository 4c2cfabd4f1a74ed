# feature_effects/config/loader.py
"""YAML configuration loading with environment overrides.

Configuration files have two optional sections::

    engine:
      grid_resolution: 20
      n_jobs: 4
      center_tolerance: 0.5
      domains:
        age: [18, 90]
    request:
      kind: ice
      features: [age]
      center_at: 18

Environment variables ``FEATURE_EFFECTS_<SECTION>__<KEY>`` override file
values, e.g. ``FEATURE_EFFECTS_ENGINE__N_JOBS=8``.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .effect_config import EffectConfig, EffectRequest
from ..utils.logger import get_logger
from ..utils.exceptions import (
    ConfigurationError,
    handle_and_reraise,
    create_error_context
)

logger = get_logger(__name__)

ENV_PREFIX = "FEATURE_EFFECTS_"
ENV_SEPARATOR = "__"


class ConfigLoader:
    """Loads engine configuration and effect requests from YAML.

    Example:
        >>> loader = ConfigLoader('config/')
        >>> config = loader.load_effect_config('effects.yaml')
        >>> request = loader.load_request('effects.yaml')
    """

    def __init__(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        allow_environment_override: bool = True,
        encoding: str = 'utf-8'
    ) -> None:
        """Initialize configuration loader.

        Args:
            config_dir: Directory relative paths are resolved against
            allow_environment_override: Whether to apply FEATURE_EFFECTS_* variables
            encoding: File encoding for configuration files
        """
        self.config_dir = Path(config_dir) if config_dir else Path.cwd()
        self.allow_environment_override = allow_environment_override
        self.encoding = encoding

    def _resolve_config_path(self, file_path: Union[str, Path]) -> Path:
        file_path = Path(file_path)
        if not file_path.is_absolute():
            file_path = self.config_dir / file_path

        if not file_path.exists():
            if file_path.suffix not in ['.yaml', '.yml']:
                for suffix in ('.yaml', '.yml'):
                    candidate = file_path.with_suffix(suffix)
                    if candidate.exists():
                        return candidate
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                error_code="CONFIG_NOT_FOUND",
                context={'file_path': str(file_path)}
            )
        return file_path

    def load_yaml(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Load a YAML mapping.

        Raises:
            ConfigurationError: If the file is missing, unparsable or not a mapping
        """
        file_path = self._resolve_config_path(file_path)

        try:
            with open(file_path, 'r', encoding=self.encoding) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            handle_and_reraise(
                e, ConfigurationError,
                f"Error parsing YAML file {file_path}",
                error_code="CONFIG_PARSE_FAILED",
                context=create_error_context(file_path=str(file_path))
            )

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a dictionary, got {type(config).__name__}",
                error_code="CONFIG_NOT_MAPPING",
                context={'file_path': str(file_path)}
            )

        logger.debug(f"Loaded configuration from {file_path}")
        return config

    def save_yaml(self, config: Dict[str, Any], file_path: Union[str, Path]) -> Path:
        """Write a configuration mapping to YAML."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', encoding=self.encoding) as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, indent=2)

        logger.info(f"Configuration saved to {file_path}")
        return file_path

    def merge_configs(
        self,
        base_config: Dict[str, Any],
        override_config: Dict[str, Any],
        merge_strategy: str = 'deep'
    ) -> Dict[str, Any]:
        """Merge configuration dictionaries.

        Args:
            base_config: Base configuration dictionary
            override_config: Override configuration dictionary
            merge_strategy: Merging strategy ('deep', 'shallow', 'replace')
        """
        if merge_strategy == 'replace':
            return dict(override_config)
        if merge_strategy == 'shallow':
            merged = dict(base_config)
            merged.update(override_config)
            return merged
        if merge_strategy == 'deep':
            return self._deep_merge(base_config, override_config)
        raise ConfigurationError(
            f"Unknown merge strategy: {merge_strategy}",
            error_code="PARAM_INVALID_VALUE",
            context={'merge_strategy': merge_strategy}
        )

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def apply_environment_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply FEATURE_EFFECTS_<SECTION>__<KEY> environment overrides."""
        if not self.allow_environment_override:
            return config

        env_overrides: Dict[str, Any] = {}
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue
            config_path = env_key[len(ENV_PREFIX):].lower().split(ENV_SEPARATOR)
            if len(config_path) < 2:
                continue
            self._set_nested_config(env_overrides, config_path, self._parse_env_value(env_value))

        if env_overrides:
            logger.info(f"Applying environment overrides: {sorted(env_overrides)}")
            config = self.merge_configs(config, env_overrides)

        return config

    def _parse_env_value(self, value: str) -> Any:
        # JSON covers numbers, booleans, null, lists and mappings
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    def _set_nested_config(self, config: Dict[str, Any], path: List[str], value: Any) -> None:
        current = config
        for key in path[:-1]:
            current = current.setdefault(key, {})
        current[path[-1]] = value

    def load_raw(self, file_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """Load a file (if given) and apply environment overrides."""
        config: Dict[str, Any] = {'engine': {}}
        if file_path is not None:
            config = self.merge_configs(config, self.load_yaml(file_path))
        return self.apply_environment_overrides(config)

    def load_effect_config(self, file_path: Optional[Union[str, Path]] = None) -> EffectConfig:
        """Build an ``EffectConfig`` from the ``engine`` section.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        section = self.load_raw(file_path).get('engine') or {}
        unknown = set(section) - set(EffectConfig.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"Unknown engine settings: {sorted(unknown)}",
                error_code="UNKNOWN_CONFIG_KEYS",
                context={'keys': sorted(unknown)}
            )

        config = EffectConfig(**section)
        logger.info(f"Effect configuration loaded: {config.to_dict()}")
        return config

    def load_request(self, file_path: Union[str, Path]) -> EffectRequest:
        """Build an ``EffectRequest`` from the ``request`` section."""
        section = self.load_raw(file_path).get('request')
        if not section:
            raise ConfigurationError(
                f"No 'request' section in {file_path}",
                error_code="REQUEST_MISSING",
                context={'file_path': str(file_path)}
            )
        return EffectRequest.from_dict(section)


def load_config(file_path: Optional[Union[str, Path]] = None, **kwargs: Any) -> EffectConfig:
    """Load an ``EffectConfig`` from YAML and the environment.

    Example:
        >>> config = load_config('effects.yaml')
    """
    return ConfigLoader(**kwargs).load_effect_config(file_path)


def save_config(
    config: EffectConfig,
    file_path: Union[str, Path],
    request: Optional[EffectRequest] = None
) -> Path:
    """Save an ``EffectConfig`` (and optionally a request) to YAML."""
    data: Dict[str, Any] = {'engine': config.to_dict()}
    if request is not None:
        data['request'] = request.to_dict()
    return ConfigLoader().save_yaml(data, file_path)
