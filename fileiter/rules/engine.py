#!/usr/bin/env python3
"""Size and modification-time filtering for scanned files.

All bounds are exclusive: a file of exactly ``bigger_than`` bytes, or
modified exactly at ``newer_than``, does not match. An unset bound never
excludes anything.

Example:
    >>> bounds = ScanBounds(bigger_than=10)
    >>> FileFilter(NameMatcher(), bounds).matches_stat(10, datetime.now(timezone.utc))
    False
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fileiter.rules.patterns import NameMatcher


@dataclass(frozen=True)
class ScanBounds:
    """Resolved size and time limits for one scan.

    Instants are timezone-aware datetimes.
    """

    bigger_than: Optional[int] = None
    smaller_than: Optional[int] = None
    newer_than: Optional[datetime] = None
    older_than: Optional[datetime] = None


def matches_size(size: int, bounds: ScanBounds) -> bool:
    """Check a size in bytes against the size bounds."""
    return (bounds.bigger_than is None or size > bounds.bigger_than) and (
        bounds.smaller_than is None or size < bounds.smaller_than
    )


def matches_time(modified: datetime, bounds: ScanBounds) -> bool:
    """Check a modification instant against the time bounds."""
    return (bounds.older_than is None or modified < bounds.older_than) and (
        bounds.newer_than is None or modified > bounds.newer_than
    )


class FileFilter:
    """All predicates of one scan, bound to its configuration.

    The name matcher is fixed at entity initialisation. Bounds are replaced
    at the start of every scan.
    """

    def __init__(self, names: NameMatcher, bounds: Optional[ScanBounds] = None):
        """Initialize filter.

        Args:
            names: File-name matcher
            bounds: Size and time bounds (default: unbounded)
        """
        self.names = names
        self.bounds = bounds or ScanBounds()

    def matches_stat(self, size: int, modified: datetime) -> bool:
        """Check size first, then time."""
        return matches_size(size, self.bounds) and matches_time(modified, self.bounds)
