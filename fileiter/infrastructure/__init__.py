"""fileiter Infrastructure Layer.

This layer provides services used by processors and data sources:
- ConfigManager: Hierarchical YAML configuration
- Logger: Structured logging system
- EntityContext: Attribute lookup, token substitution and variable resolution
"""

from .config_manager import ConfigManager as Config
from .config_manager import ConfigSource, ConfigValue, get_config_manager, set_global_config
from .context import EntityContext, VariableResolver
from .logger import ContextFormatter, Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "ContextFormatter",
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ConfigSource",
    "ConfigValue",
    "Config",
    "get_config_manager",
    "set_global_config",
    # Context exports
    "EntityContext",
    "VariableResolver",
]
