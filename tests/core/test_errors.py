#!/usr/bin/env python3
"""Tests for the exception hierarchy."""

import pytest

from fileiter.core.constants import ErrorCode
from fileiter.core.errors import ConfigurationError, DataSourceError, FileIterError


class TestErrors:
    """Tests for fileiter exceptions."""

    def test_base_error(self):
        """Test the base error carries message and code."""
        error = FileIterError("boom")
        assert error.message == "boom"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert str(error) == "boom"

    def test_configuration_error_default_code(self):
        """Test configuration errors default to invalid input."""
        error = ConfigurationError("bad attribute")
        assert isinstance(error, FileIterError)
        assert error.error_code == ErrorCode.INVALID_INPUT

    def test_data_source_error_path(self):
        """Test data source errors record the path involved."""
        error = DataSourceError("missing", ErrorCode.NOT_FOUND, path="/data/a.zip")
        assert error.path == "/data/a.zip"
        assert error.error_code == ErrorCode.NOT_FOUND

    @pytest.mark.parametrize("error_class", [ConfigurationError, DataSourceError])
    def test_catchable_as_base(self, error_class):
        """Test every error can be caught as FileIterError."""
        with pytest.raises(FileIterError):
            raise error_class("x")
