#!/usr/bin/env python3
"""Data source reading plain files, with a fallback into a zip archive.

A query is a path relative to ``basePath``. If it names a regular file,
that file is opened. Otherwise the query's parent directory is searched for
an archive (a regular file whose name ends in ``archiveSuffix``, ``.zip`` by
default) and the query's file name is opened as an entry of that archive.

One archive per directory is expected. When several are present the one
whose name sorts first is used.

Properties:
- ``basePath``: root for relative queries (default: working directory)
- ``encoding``: character encoding of returned streams (default: locale)
- ``archiveSuffix``: file-name suffix identifying the archive

Every call opens the archive afresh; nothing is cached between calls.

Example:
    >>> source = ZipFolderDataSource()
    >>> source.init(EntityContext(), {"basePath": "/data/exports"})
    >>> with source.get_data("2024/report.csv") as stream:
    ...     header = stream.readline()
"""

import io
import locale
import os
import zipfile
from typing import Any, Mapping, Optional, TextIO

from fileiter.core.constants import DEFAULT_ARCHIVE_SUFFIX, DataSourceProperty, ErrorCode
from fileiter.core.errors import DataSourceError
from fileiter.core.validators import validate_encoding
from fileiter.dataimport.base import DataSource
from fileiter.infrastructure.context import EntityContext
from fileiter.infrastructure.logger import Logger, get_logger


class ZipFolderDataSource(DataSource):
    """Resolves queries to plain files or to entries of a co-located zip."""

    def __init__(self, logger: Optional[Logger] = None):
        """Initialize data source.

        Args:
            logger: Logger to use (default: global logger)
        """
        self.logger = logger or get_logger()
        self.base_path: Optional[str] = None
        self.encoding: Optional[str] = None
        self.archive_suffix = DEFAULT_ARCHIVE_SUFFIX

    def init(self, context: EntityContext, properties: Mapping[str, Any]) -> None:
        """Read data source properties.

        Raises:
            ValidationError: If the encoding is unknown
        """
        self.base_path = properties.get(DataSourceProperty.BASE_PATH)
        if properties.get(DataSourceProperty.ENCODING) is not None:
            self.encoding = validate_encoding(properties[DataSourceProperty.ENCODING])
        if properties.get(DataSourceProperty.ARCHIVE_SUFFIX):
            self.archive_suffix = properties[DataSourceProperty.ARCHIVE_SUFFIX]

    def get_data(self, query: str) -> TextIO:
        """Open a text stream for the query.

        Args:
            query: Path relative to the base path (absolute paths are used as is)

        Returns:
            Text stream; the caller must close it

        Raises:
            DataSourceError: If neither the file nor an archive entry can be opened
        """
        file_path = self.get_path(query)
        if os.path.isfile(file_path):
            return self._open_file(file_path)
        return self._open_archive_entry(file_path)

    def get_path(self, query: str) -> str:
        """Resolve a query against the base path."""
        if self.base_path:
            root = self.base_path
            if not os.path.isabs(root):
                root = os.path.abspath(root)
                self.logger.warning(
                    "ZipFolderDataSource.basePath is not absolute", resolved=root
                )
        else:
            root = os.path.abspath(".")
            self.logger.warning("ZipFolderDataSource.basePath is empty", resolved=root)

        return os.path.join(root, query)

    def find_archive(self, directory: str) -> str:
        """Locate the archive inside a directory.

        Raises:
            DataSourceError: If the directory cannot be listed or holds no archive
        """
        try:
            with os.scandir(directory) as entries:
                candidates = sorted(
                    entry.path
                    for entry in entries
                    if entry.name.endswith(self.archive_suffix) and entry.is_file()
                )
        except OSError as e:
            raise DataSourceError(
                f"Unable to open Directory : {directory}", ErrorCode.NOT_FOUND, path=directory
            ) from e

        if not candidates:
            raise DataSourceError(
                f"No archive found in Directory : {directory}", ErrorCode.NOT_FOUND, path=directory
            )
        return candidates[0]

    def _open_file(self, file_path: str) -> TextIO:
        try:
            return open(file_path, "r", encoding=self._encoding(), newline="")
        except OSError as e:
            raise DataSourceError(f"Unable to open File : {file_path}", path=file_path) from e

    def _open_archive_entry(self, file_path: str) -> TextIO:
        directory = os.path.dirname(file_path)
        archive_path = self.find_archive(directory)
        entry_name = os.path.basename(file_path)
        self.logger.debug("Falling back to archive", archive=archive_path, entry=entry_name)

        try:
            archive = zipfile.ZipFile(archive_path)
        except (OSError, zipfile.BadZipFile) as e:
            raise DataSourceError(
                f"Unable to open archive : {archive_path}", path=archive_path
            ) from e

        # the entry stream keeps the archive file open until it is closed
        with archive:
            try:
                raw = archive.open(entry_name)
            except (KeyError, OSError, zipfile.BadZipFile, RuntimeError) as e:
                raise DataSourceError(
                    f"Unable to locate File : {entry_name} inside archive : {archive_path}",
                    ErrorCode.NOT_FOUND,
                    path=archive_path,
                ) from e

        return io.TextIOWrapper(raw, encoding=self._encoding(), newline="")

    def _encoding(self) -> str:
        return self.encoding or locale.getpreferredencoding(False)
