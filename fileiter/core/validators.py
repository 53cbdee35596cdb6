"""
fileiter Core: Input Validators.

This module provides validation functions for entity attributes and data
source properties: base directories, regular expressions, booleans and
character encodings.
"""
import codecs
import os
import re
from typing import Any, Dict, Pattern

from fileiter.core.constants import ConfigKey, EntityAttribute, ErrorCode
from fileiter.core.errors import ConfigurationError


class ValidationError(ConfigurationError):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message, error_code)


def validate_base_dir(base_dir: str) -> str:
    """Validate that the scan root exists and is a directory.

    Args:
        base_dir: Directory path after token substitution

    Returns:
        The directory path unchanged

    Raises:
        ValidationError: If the path is empty or not a directory
    """
    if base_dir is None:
        raise ValidationError(f"'{EntityAttribute.BASE_DIR}' is a required attribute")

    if not isinstance(base_dir, str):
        raise ValidationError(f"Path must be string, got {type(base_dir)}")

    if "\0" in base_dir:
        raise ValidationError("Path contains null bytes")

    if not os.path.isdir(base_dir):
        raise ValidationError(
            f"'{EntityAttribute.BASE_DIR}' value: {base_dir} is not a directory",
            ErrorCode.NOT_FOUND,
        )

    return base_dir


def validate_regex(pattern: str) -> Pattern[str]:
    """Validate and compile a regex pattern.

    An empty pattern is accepted and matches every name.

    Args:
        pattern: Regex pattern string

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If pattern is invalid
    """
    if not isinstance(pattern, str):
        raise ValidationError(f"Pattern must be string, got {type(pattern)}")

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Failed to compile regex pattern {pattern!r}: {e}") from e


def parse_bool(value: Any) -> bool:
    """Parse a boolean attribute.

    Only the text "true" (any case) is true; anything else is false.

    Args:
        value: Raw attribute value

    Returns:
        Parsed boolean
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def validate_encoding(encoding: str) -> str:
    """Validate that a character encoding is known to Python.

    Args:
        encoding: Encoding name (e.g. "utf-8", "latin-1")

    Returns:
        The encoding name unchanged

    Raises:
        ValidationError: If the codec cannot be found
    """
    if not encoding:
        raise ValidationError("Encoding cannot be empty")

    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ValidationError(f"Unknown encoding: {encoding}") from e

    return encoding


def validate_entity_config(entity: Dict[str, Any]) -> bool:
    """Validate the structure of one entity entry.

    Only structural checks happen here; attribute values are validated when
    the processor is initialised because they may still contain ``${...}``
    references.

    Args:
        entity: Entity configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If entity is invalid
    """
    if not isinstance(entity, dict):
        raise ValidationError("Entity must be a dictionary")

    if ConfigKey.ENTITY_NAME not in entity:
        raise ValidationError("Entity must have 'name' field")

    name = entity[ConfigKey.ENTITY_NAME]
    if not isinstance(name, str) or not name:
        raise ValidationError(f"Entity name must be a non-empty string: {name!r}")

    for key, value in entity.items():
        if isinstance(value, (dict, list)):
            raise ValidationError(f"Entity '{name}' attribute '{key}' must be a scalar")

    return True


def validate_data_source_config(name: str, source: Dict[str, Any]) -> bool:
    """Validate the structure of one data source entry.

    Args:
        name: Data source name
        source: Data source properties

    Returns:
        True if valid

    Raises:
        ValidationError: If data source is invalid
    """
    if not isinstance(source, dict):
        raise ValidationError(f"Data source '{name}' must be a dictionary")

    for key, value in source.items():
        if isinstance(value, (dict, list)):
            raise ValidationError(f"Data source '{name}' property '{key}' must be a scalar")

    return True
