"""
fileiter Core: Exception hierarchy.

Configuration problems and I/O problems are both fatal for the current
entity. A candidate that fails a filter is not an error, and neither is the
end of a scan (``next_record()`` returns ``None``).
"""
from typing import Optional

from fileiter.core.constants import ErrorCode


class FileIterError(Exception):
    """Base exception for fileiter."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(FileIterError):
    """Missing or invalid entity configuration.

    Raised for a missing ``baseDir``, a base path that is not a directory,
    an unparseable bound, or an indirect reference of the wrong type.
    """

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class DataSourceError(FileIterError):
    """I/O failure while scanning a directory or resolving a file."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        path: Optional[str] = None,
    ):
        super().__init__(message, error_code)
        self.path = path
