#!/usr/bin/env python3
"""Layered configuration for fileiter.

A data-config document looks like::

    fileiter:
      logging: {level: INFO, file: null}
      variables: {dih: {last_index_time: 2024-01-01 00:00:00}}
      data_sources:
        exports: {type: zip_folder, basePath: /data/exports, encoding: utf-8}
      entities:
        - name: logs
          baseDir: /var/log
          fileName: '\\.log$'
          newerThan: "'NOW-1DAY'"

Values are kept per source layer. A lookup walks the layers from the
highest precedence down and returns the first value found:

    RUNTIME > CLI_ARGS > ENVIRONMENT (FILEITER_*) > USER_CONFIG > COMPILED_DEFAULTS

Example:
    >>> config = ConfigManager("data-config.yaml")
    >>> config.get("fileiter.logging.level")
    'INFO'
    >>> config.get_entity("logs")["baseDir"]
    '/var/log'
"""

import copy
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import yaml

from fileiter.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode
from fileiter.core.errors import ConfigurationError
from fileiter.core.validators import validate_data_source_config, validate_entity_config


class ConfigSource(Enum):
    """Configuration layers, lowest precedence first."""

    COMPILED_DEFAULTS = 1
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4
    RUNTIME = 5


@dataclass(frozen=True)
class ConfigValue:
    """A looked-up value and the layer that supplied it."""

    value: Any
    source: ConfigSource


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, recursing into nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _assign(tree: Dict[str, Any], path: Sequence[str], value: Any) -> None:
    for part in path[:-1]:
        child = tree.get(part)
        if not isinstance(child, dict):
            child = tree[part] = {}
        tree = child
    tree[path[-1]] = value


def _lookup(tree: Any, path: Sequence[str]) -> Any:
    for part in path:
        if not isinstance(tree, dict) or part not in tree:
            return None
        tree = tree[part]
    return tree


class ConfigManager:
    """Thread-safe layered configuration with entity and data source lookup."""

    ENV_PREFIX = "FILEITER_"

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Data-config YAML file to load as USER_CONFIG
            load_environment: Whether to read FILEITER_* variables
        """
        self._lock = threading.RLock()
        self._layers: Dict[ConfigSource, Dict[str, Any]] = {
            ConfigSource.COMPILED_DEFAULTS: copy.deepcopy(DEFAULT_CONFIG)
        }

        if config_file:
            self.load_file(config_file)
        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load a YAML data-config file into one layer.

        Raises:
            ConfigurationError: If the file is missing, unreadable, not YAML,
                or not a valid document
        """
        path = Path(file_path).expanduser().resolve()
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parse error in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(
                f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR
            ) from e

        if not isinstance(document, dict):
            raise ConfigurationError(f"Invalid config format in {file_path}")

        self.load_dict(document, source)

    def load_dict(self, document: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Replace one layer with a validated document.

        A document without the top-level ``fileiter`` key is wrapped in one.

        Raises:
            ConfigurationError: If entities or data sources are malformed
        """
        if ConfigKey.ROOT not in document:
            document = {ConfigKey.ROOT: document}
        self._validate(document[ConfigKey.ROOT])

        with self._lock:
            self._layers[source] = copy.deepcopy(document)

    @staticmethod
    def _validate(section: Any) -> None:
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{ConfigKey.ROOT}' section must be a dictionary")

        entities = section.get(ConfigKey.ENTITIES)
        if entities is not None:
            if not isinstance(entities, list):
                raise ConfigurationError("Entities must be a list")
            for i, entity in enumerate(entities):
                try:
                    validate_entity_config(entity)
                except ConfigurationError as e:
                    raise ConfigurationError(
                        f"Invalid entity configuration at index {i}: {e}"
                    ) from e

        sources = section.get(ConfigKey.DATA_SOURCES)
        if sources is not None:
            if not isinstance(sources, dict):
                raise ConfigurationError("Data sources must be a mapping of name to properties")
            for name, properties in sources.items():
                validate_data_source_config(name, properties)

    def _load_environment(self) -> None:
        """Build the ENVIRONMENT layer from FILEITER_* variables.

        ``FILEITER_LOGGING_LEVEL=DEBUG`` sets ``fileiter.logging.level``.
        """
        overrides: Dict[str, Any] = {}
        for name, raw in os.environ.items():
            if not name.startswith(self.ENV_PREFIX):
                continue
            path = name[len(self.ENV_PREFIX):].lower().split("_")
            if all(path):
                _assign(overrides, path, self._parse_env_value(raw))

        if overrides:
            with self._lock:
                self._layers[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: overrides}

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Type an environment value as bool, int, float or str."""
        lowered = value.lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False

        for convert in (int, float):
            try:
                return convert(value)
            except ValueError:
                continue
        return value

    def _ordered(self, highest_first: bool) -> Iterator[Tuple[ConfigSource, Dict[str, Any]]]:
        ordered = sorted(self._layers.items(), key=lambda item: item[0].value)
        return reversed(ordered) if highest_first else iter(ordered)

    def get_value(self, key: str) -> Optional[ConfigValue]:
        """Look up a dotted key, reporting which layer supplied it.

        Returns:
            ConfigValue, or None if no layer sets the key
        """
        path = key.split(".")
        with self._lock:
            for source, tree in self._ordered(highest_first=True):
                value = _lookup(tree, path)
                if value is not None:
                    return ConfigValue(value, source)
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``fileiter.logging.level``."""
        found = self.get_value(key)
        return default if found is None else found.value

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set a dotted key in one layer."""
        with self._lock:
            _assign(self._layers.setdefault(source, {}), key.split("."), value)

    def get_all(self) -> Dict[str, Any]:
        """Return every layer deep-merged, higher layers winning."""
        merged: Dict[str, Any] = {}
        with self._lock:
            for _, tree in self._ordered(highest_first=False):
                merged = deep_merge(merged, tree)
        return merged

    def _section(self, key: str, default: Any) -> Any:
        return self.get_all()[ConfigKey.ROOT].get(key) or default

    def get_entities(self) -> List[Dict[str, Any]]:
        """Get all configured entities in declaration order."""
        return list(self._section(ConfigKey.ENTITIES, []))

    def get_entity(self, name: str) -> Dict[str, Any]:
        """Get one entity by name.

        Raises:
            ConfigurationError: If no entity has that name
        """
        for entity in self.get_entities():
            if entity.get(ConfigKey.ENTITY_NAME) == name:
                return entity
        raise ConfigurationError(f"Unknown entity: {name}", ErrorCode.NOT_FOUND)

    def get_data_source(self, name: str) -> Dict[str, Any]:
        """Get a copy of one data source's properties.

        Raises:
            ConfigurationError: If no data source has that name
        """
        sources = self._section(ConfigKey.DATA_SOURCES, {})
        if name not in sources:
            raise ConfigurationError(f"Unknown data source: {name}", ErrorCode.NOT_FOUND)
        return dict(sources[name] or {})

    def get_variables(self) -> Dict[str, Any]:
        """Get the variable tree used for ``${...}`` references."""
        return self._section(ConfigKey.VARIABLES, {})

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Drop one layer, or every layer but the compiled defaults."""
        with self._lock:
            for layer in [source] if source else list(self._layers):
                if layer != ConfigSource.COMPILED_DEFAULTS:
                    self._layers.pop(layer, None)


_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get the global configuration manager, creating it on first use."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: ConfigManager) -> None:
    """Install config as the global configuration manager."""
    global _global_config
    _global_config = config
