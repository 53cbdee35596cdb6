"""Lookup of processor and data source implementations by configured type."""

from typing import Dict, Type

from fileiter.core.constants import ErrorCode
from fileiter.core.errors import ConfigurationError
from fileiter.dataimport.base import DataSource, EntityProcessor
from fileiter.dataimport.file_iterator import FileIteratorEntityProcessor
from fileiter.dataimport.zip_folder import ZipFolderDataSource

PROCESSORS: Dict[str, Type[EntityProcessor]] = {
    "file_iterator": FileIteratorEntityProcessor,
    "FileIteratorEntityProcessor": FileIteratorEntityProcessor,
}

DATA_SOURCES: Dict[str, Type[DataSource]] = {
    "zip_folder": ZipFolderDataSource,
    "ZipFolderDataSource": ZipFolderDataSource,
}


def get_processor_class(name: str) -> Type[EntityProcessor]:
    """Get the processor class registered under name.

    Raises:
        ConfigurationError: If nothing is registered under name
    """
    try:
        return PROCESSORS[name]
    except KeyError:
        raise ConfigurationError(f"Unknown processor type: {name}", ErrorCode.NOT_FOUND) from None


def get_data_source_class(name: str) -> Type[DataSource]:
    """Get the data source class registered under name.

    Raises:
        ConfigurationError: If nothing is registered under name
    """
    try:
        return DATA_SOURCES[name]
    except KeyError:
        raise ConfigurationError(f"Unknown data source type: {name}", ErrorCode.NOT_FOUND) from None
