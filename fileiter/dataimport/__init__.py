"""fileiter data import components.

- FileIteratorEntityProcessor: emits one record per matching file
- ZipFolderDataSource: opens plain files or entries of a co-located zip
- DirectoryWalker: lazy, optionally recursive directory listing
- resolve_bounds: per-scan resolution of size and date bounds
"""

from .base import DataSource, EntityProcessor, Record
from .bounds import Resolved, WasString, resolve_bounds, resolve_date, resolve_size
from .file_iterator import FileIteratorEntityProcessor
from .registry import get_data_source_class, get_processor_class
from .walker import DirectoryWalker
from .zip_folder import ZipFolderDataSource

__all__ = [
    # Interfaces
    "EntityProcessor",
    "DataSource",
    "Record",
    # Scanning
    "DirectoryWalker",
    "FileIteratorEntityProcessor",
    # Bounds
    "Resolved",
    "WasString",
    "resolve_bounds",
    "resolve_date",
    "resolve_size",
    # File resolution
    "ZipFolderDataSource",
    # Registry
    "get_processor_class",
    "get_data_source_class",
]
