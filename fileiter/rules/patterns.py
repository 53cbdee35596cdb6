#!/usr/bin/env python3
r"""File-name matching for directory scans.

Names are tested with regular expressions using search semantics, so a
pattern only has to occur somewhere in the file name:

- ``fileName``: a file must contain a match to be kept
- ``excludes``: a file containing a match is dropped

Only the base name of a path is tested, never its directory part.

The exclude pattern is consulted only when a ``fileName`` pattern is also
configured. Without a ``fileName`` pattern every name passes, whatever
``excludes`` says.

Example:
    >>> matcher = NameMatcher.from_strings(r"x.*\.log", r"\.tmp")
    >>> matcher.matches("x2.log")
    True
    >>> matcher.matches("x2.log.tmp")
    False
"""

from dataclasses import dataclass
from typing import Optional, Pattern

from fileiter.core.validators import validate_regex


@dataclass(frozen=True)
class NameMatcher:
    """Include/exclude regex pair applied to file names."""

    pattern: Optional[Pattern[str]] = None
    exclude: Optional[Pattern[str]] = None

    @classmethod
    def from_strings(
        cls, pattern: Optional[str] = None, exclude: Optional[str] = None
    ) -> "NameMatcher":
        """Compile a matcher from raw pattern strings.

        Args:
            pattern: Name pattern, or None to accept every name
            exclude: Exclude pattern, or None

        Returns:
            Compiled matcher

        Raises:
            ValidationError: If either pattern does not compile
        """
        return cls(
            pattern=validate_regex(pattern) if pattern is not None else None,
            exclude=validate_regex(exclude) if exclude is not None else None,
        )

    def matches(self, name: str) -> bool:
        """Check a bare file name.

        Args:
            name: File name without directory

        Returns:
            True if the name should be kept
        """
        if self.pattern is None:
            return True
        return bool(self.pattern.search(name)) and (
            self.exclude is None or not self.exclude.search(name)
        )

    def __bool__(self) -> bool:
        """Return True if any pattern is configured."""
        return self.pattern is not None or self.exclude is not None
