#!/usr/bin/env python3
"""Lazy directory traversal.

The walker lists one directory at a time and yields the files whose
names pass the name matcher. Subdirectories are descended into only when
the walk is recursive; they are never yielded themselves.

Listing order within a directory is the order the filesystem reports.
"""

import os
from typing import Iterator

from fileiter.core.constants import ErrorCode
from fileiter.core.errors import DataSourceError
from fileiter.rules.patterns import NameMatcher


class DirectoryWalker:
    """Generator-based walk over a directory tree."""

    def __init__(self, names: NameMatcher, recursive: bool = False):
        """Initialize walker.

        Args:
            names: Matcher applied to each file name before it is yielded
            recursive: Whether to descend into subdirectories
        """
        self.names = names
        self.recursive = recursive

    def walk(self, root: str) -> Iterator[str]:
        """Yield paths of matching files under root.

        Args:
            root: Directory to list

        Yields:
            File paths joined onto root

        Raises:
            DataSourceError: If any directory cannot be listed
        """
        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    if entry.is_dir():
                        if self.recursive:
                            yield from self.walk(entry.path)
                        continue
                    if self.names.matches(entry.name):
                        yield entry.path
        except PermissionError as e:
            raise DataSourceError(
                f"Unable to list directory: {root}", ErrorCode.PERMISSION_DENIED, path=root
            ) from e
        except FileNotFoundError as e:
            raise DataSourceError(
                f"Directory disappeared during scan: {root}", ErrorCode.NOT_FOUND, path=root
            ) from e
        except OSError as e:
            raise DataSourceError(f"Unable to list directory: {root}", path=root) from e
