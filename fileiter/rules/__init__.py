"""fileiter Rules System.

This module provides the predicates applied to scanned files:
- NameMatcher: fileName/excludes regular expressions
- ScanBounds, FileFilter: exclusive size and modification-time bounds
"""

from .engine import FileFilter, ScanBounds, matches_size, matches_time
from .patterns import NameMatcher

__all__ = [
    # Name matching
    "NameMatcher",
    # Bounds
    "ScanBounds",
    "FileFilter",
    "matches_size",
    "matches_time",
]
