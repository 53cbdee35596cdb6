"""
fileiter Core: Constants

This module provides system-wide constants, error codes, configuration
attribute names and record keys shared by the scan driver and the
layered file resolver.
"""
from enum import IntEnum

# Version information
FILEITER_VERSION = "1.0.0"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for fileiter operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad path, invalid configuration
    NOT_FOUND = 2  # File, archive or entry doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    INTERNAL_ERROR = 6  # Bug in fileiter or unexpected I/O failure


# Entity attributes read from the host configuration
class EntityAttribute:
    """Entity attribute names understood by the file iterator processor."""

    FILE_NAME = "fileName"
    BASE_DIR = "baseDir"
    EXCLUDES = "excludes"
    NEWER_THAN = "newerThan"
    OLDER_THAN = "olderThan"
    BIGGER_THAN = "biggerThan"
    SMALLER_THAN = "smallerThan"
    RECURSIVE = "recursive"


# Data source properties
class DataSourceProperty:
    """Property names understood by the zip folder data source."""

    BASE_PATH = "basePath"
    ENCODING = "encoding"
    ARCHIVE_SUFFIX = "archiveSuffix"


# Keys of each emitted file record
class RecordKey:
    """Keys of the mapping produced for every matching file."""

    DIR = "fileDir"
    FILE = "file"
    ABSOLUTE_FILE = "fileAbsolutePath"
    SIZE = "fileSize"
    LAST_MODIFIED = "fileLastModified"


# Configuration keys
class ConfigKey:
    """Configuration document key constants."""

    ROOT = "fileiter"
    LOGGING = "logging"
    VARIABLES = "variables"
    DATA_SOURCES = "data_sources"
    ENTITIES = "entities"

    ENTITY_NAME = "name"
    ENTITY_PROCESSOR = "processor"
    SOURCE_TYPE = "type"


# Literal date bounds, e.g. "2024-03-01 12:30:00"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Leading token stripped from quoted date-math expressions
NOW_TOKEN = "NOW"

DEFAULT_ARCHIVE_SUFFIX = ".zip"

DEFAULT_PROCESSOR = "file_iterator"
DEFAULT_DATA_SOURCE = "zip_folder"

# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
        },
        ConfigKey.VARIABLES: {},
        ConfigKey.DATA_SOURCES: {},
        ConfigKey.ENTITIES: [],
    }
}
