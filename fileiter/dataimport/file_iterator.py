#!/usr/bin/env python3
"""Entity processor producing one record per matching file.

Entity attributes:
- ``baseDir`` (required): directory to scan
- ``fileName``: regex a file name must contain
- ``excludes``: regex of file names to drop (only with ``fileName``)
- ``recursive``: "true" to descend into subdirectories
- ``biggerThan`` / ``smallerThan``: exclusive size bounds in bytes
- ``newerThan`` / ``olderThan``: exclusive modification-time bounds

Patterns, base directory and the recursive flag are read once in
:meth:`FileIteratorEntityProcessor.init`. The bounds are resolved again at
the start of every scan.

Each record has the keys ``fileDir``, ``file``, ``fileAbsolutePath``,
``fileSize`` and ``fileLastModified`` (a timezone-aware datetime).

Example:
    >>> processor = FileIteratorEntityProcessor()
    >>> processor.init(EntityContext({"baseDir": "/var/log", "fileName": r"\\.log$"}))
    >>> record = processor.next_record()
"""

import os
from datetime import datetime, timezone
from typing import Iterator, Optional

from fileiter.core.constants import EntityAttribute, ErrorCode, RecordKey
from fileiter.core.errors import DataSourceError
from fileiter.core.validators import parse_bool, validate_base_dir
from fileiter.dataimport.base import EntityProcessor, Record
from fileiter.dataimport.bounds import resolve_bounds
from fileiter.dataimport.walker import DirectoryWalker
from fileiter.infrastructure.context import EntityContext
from fileiter.infrastructure.logger import Logger, get_logger
from fileiter.rules.engine import FileFilter
from fileiter.rules.patterns import NameMatcher


class FileIteratorEntityProcessor(EntityProcessor):
    """Scans a directory tree and emits file metadata records."""

    def __init__(self, logger: Optional[Logger] = None):
        """Initialize processor.

        Args:
            logger: Logger to use (default: global logger)
        """
        super().__init__()
        self.logger = logger or get_logger()
        self.base_dir: Optional[str] = None
        self.recursive = False
        self.filter: Optional[FileFilter] = None
        self._rows: Optional[Iterator[Record]] = None
        self._finished = False
        self._emitted = 0

    def init(self, context: EntityContext) -> None:
        """Read the structural attributes of the entity.

        Raises:
            ConfigurationError: If ``baseDir`` is missing or not a directory,
                or a pattern does not compile
        """
        super().init(context)

        file_name = context.get_entity_attribute(EntityAttribute.FILE_NAME)
        if file_name is not None:
            file_name = context.replace_tokens(file_name)

        base_dir = context.get_entity_attribute(EntityAttribute.BASE_DIR)
        if base_dir is not None:
            base_dir = context.replace_tokens(base_dir)
        self.base_dir = validate_base_dir(base_dir)

        self.recursive = parse_bool(context.get_entity_attribute(EntityAttribute.RECURSIVE))

        excludes = context.get_entity_attribute(EntityAttribute.EXCLUDES)
        if excludes is not None:
            excludes = context.replace_tokens(excludes)

        self.filter = FileFilter(NameMatcher.from_strings(file_name, excludes))
        self.destroy()

    def next_record(self) -> Optional[Record]:
        """Return the next matching file, or None when the scan is done.

        The first call of a scan resolves the bounds and starts the walk;
        later calls resume it.

        Raises:
            ConfigurationError: If a bound cannot be resolved
            DataSourceError: If a directory or file cannot be read
        """
        if self.filter is None:
            raise RuntimeError("init() must be called before next_record()")

        if self._rows is None:
            self._rows = self._start_scan()

        if self._finished:
            return None

        record = next(self._rows, None)
        if record is None:
            self._finished = True
            self.logger.info("Scan finished", entity=self.context.name, records=self._emitted)
        else:
            self._emitted += 1
        return record

    def destroy(self) -> None:
        """Drop the current scan; the next call to next_record() rescans."""
        self._rows = None
        self._finished = False

    def _start_scan(self) -> Iterator[Record]:
        self.filter.bounds = resolve_bounds(self.context)
        self._emitted = 0
        self.logger.debug(
            "Starting scan",
            entity=self.context.name,
            base_dir=self.base_dir,
            recursive=self.recursive,
            bounds=self.filter.bounds,
        )
        walker = DirectoryWalker(self.filter.names, self.recursive)
        return self._records(walker.walk(self.base_dir))

    def _records(self, paths: Iterator[str]) -> Iterator[Record]:
        for path in paths:
            try:
                st = os.stat(path)
            except OSError as e:
                raise DataSourceError(
                    f"Unable to read attributes of file: {path}", ErrorCode.NOT_FOUND, path=path
                ) from e

            modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
            if not self.filter.matches_stat(st.st_size, modified):
                continue

            absolute = os.path.abspath(path)
            yield {
                RecordKey.DIR: os.path.dirname(absolute),
                RecordKey.FILE: os.path.basename(path),
                RecordKey.ABSOLUTE_FILE: absolute,
                RecordKey.SIZE: st.st_size,
                RecordKey.LAST_MODIFIED: modified,
            }
