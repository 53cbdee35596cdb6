#!/usr/bin/env python3
"""Tests for ZipFolderDataSource."""

import zipfile
from pathlib import Path

import pytest

from fileiter.core.constants import ErrorCode
from fileiter.core.errors import DataSourceError
from fileiter.core.validators import ValidationError
from fileiter.dataimport.zip_folder import ZipFolderDataSource
from fileiter.infrastructure.context import EntityContext


def make_source(mock_logger, **properties) -> ZipFolderDataSource:
    source = ZipFolderDataSource(logger=mock_logger)
    source.init(EntityContext(), properties)
    return source


def read(source: ZipFolderDataSource, query: str) -> str:
    with source.get_data(query) as stream:
        return stream.read()


class TestGetData:
    """Tests for resolving queries."""

    def test_plain_file_wins(self, mock_logger, archive_dir: Path):
        """Test an existing file is read even when an archive holds the same name."""
        source = make_source(mock_logger, basePath=str(archive_dir), encoding="utf-8")
        assert read(source, "a.txt") == "plain a"

    def test_archive_fallback(self, mock_logger, archive_dir: Path):
        """Test a missing file is read from the directory's archive."""
        source = make_source(mock_logger, basePath=str(archive_dir), encoding="utf-8")
        assert read(source, "inner/b.txt") == "zipped b"

    def test_archive_entry_lines(self, mock_logger, archive_dir: Path):
        """Test archive entries are returned as text streams."""
        source = make_source(mock_logger, basePath=str(archive_dir), encoding="utf-8")
        with source.get_data("inner/c.csv") as stream:
            assert stream.readlines() == ["x,y\n", "1,2\n"]

    def test_plain_file_line_endings_kept(self, mock_logger, temp_dir: Path):
        """Test CRLF and bare CR in a plain file are returned unchanged."""
        (temp_dir / "a.txt").write_bytes(b"x,y\r\n1,2\r\na\rb\n")
        source = make_source(mock_logger, basePath=str(temp_dir), encoding="utf-8")
        assert read(source, "a.txt") == "x,y\r\n1,2\r\na\rb\n"

    def test_archive_entry_line_endings_kept(self, mock_logger, temp_dir: Path):
        """Test CRLF and bare CR in an archive entry are returned unchanged."""
        with zipfile.ZipFile(temp_dir / "data.zip", "w") as zf:
            zf.writestr("b.txt", b"x,y\r\n1,2\r\na\rb\n")

        source = make_source(mock_logger, basePath=str(temp_dir), encoding="utf-8")
        assert read(source, "b.txt") == "x,y\r\n1,2\r\na\rb\n"

    def test_archive_entry_crlf_lines(self, mock_logger, temp_dir: Path):
        """Test line iteration keeps each line's CRLF terminator."""
        with zipfile.ZipFile(temp_dir / "data.zip", "w") as zf:
            zf.writestr("b.txt", b"x,y\r\n1,2\r\n")

        source = make_source(mock_logger, basePath=str(temp_dir))
        with source.get_data("b.txt") as stream:
            assert stream.readlines() == ["x,y\r\n", "1,2\r\n"]

    def test_missing_entry(self, mock_logger, archive_dir: Path):
        """Test the error names both the entry and the archive."""
        source = make_source(mock_logger, basePath=str(archive_dir))
        with pytest.raises(DataSourceError) as exc_info:
            source.get_data("inner/missing.txt")

        message = str(exc_info.value)
        assert "missing.txt" in message
        assert str(archive_dir / "inner" / "archive.zip") in message
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_no_archive(self, mock_logger, archive_dir: Path):
        """Test a directory without an archive."""
        source = make_source(mock_logger, basePath=str(archive_dir))
        with pytest.raises(DataSourceError, match="No archive found in Directory"):
            source.get_data("empty/x.txt")

    def test_missing_directory(self, mock_logger, archive_dir: Path):
        """Test a query whose directory does not exist."""
        source = make_source(mock_logger, basePath=str(archive_dir))
        with pytest.raises(DataSourceError, match="Unable to open Directory"):
            source.get_data("nowhere/x.txt")

    def test_corrupt_archive(self, mock_logger, temp_dir: Path):
        """Test an unreadable archive."""
        (temp_dir / "broken.zip").write_bytes(b"not a zip")
        source = make_source(mock_logger, basePath=str(temp_dir))
        with pytest.raises(DataSourceError, match="Unable to open archive"):
            source.get_data("x.txt")

    def test_first_archive_by_name(self, mock_logger, temp_dir: Path):
        """Test the archive whose name sorts first is used."""
        for name, content in [("b.zip", "from b"), ("a.zip", "from a")]:
            with zipfile.ZipFile(temp_dir / name, "w") as zf:
                zf.writestr("e.txt", content)

        source = make_source(mock_logger, basePath=str(temp_dir))
        assert read(source, "e.txt") == "from a"

    def test_directories_are_not_archives(self, mock_logger, temp_dir: Path):
        """Test a directory named like an archive is skipped."""
        (temp_dir / "a.zip").mkdir()
        with zipfile.ZipFile(temp_dir / "b.zip", "w") as zf:
            zf.writestr("e.txt", "from b")

        source = make_source(mock_logger, basePath=str(temp_dir))
        assert read(source, "e.txt") == "from b"

    def test_archive_suffix(self, mock_logger, temp_dir: Path):
        """Test a custom archive suffix."""
        with zipfile.ZipFile(temp_dir / "bundle.jar", "w") as zf:
            zf.writestr("e.txt", "from jar")

        source = make_source(mock_logger, basePath=str(temp_dir), archiveSuffix=".jar")
        assert read(source, "e.txt") == "from jar"

    def test_absolute_query(self, mock_logger, archive_dir: Path):
        """Test absolute queries ignore the base path."""
        source = make_source(mock_logger, basePath="/nonexistent")
        assert read(source, str(archive_dir / "a.txt")) == "plain a"

    def test_stream_outlives_call(self, mock_logger, archive_dir: Path):
        """Test the entry stream stays readable after get_data returns."""
        source = make_source(mock_logger, basePath=str(archive_dir))
        stream = source.get_data("inner/b.txt")
        try:
            assert stream.read() == "zipped b"
        finally:
            stream.close()


class TestEncoding:
    """Tests for character encodings."""

    def test_encoding_applied(self, mock_logger, temp_dir: Path):
        """Test plain files are decoded with the configured encoding."""
        (temp_dir / "latin.txt").write_bytes("café".encode("latin-1"))
        source = make_source(mock_logger, basePath=str(temp_dir), encoding="latin-1")
        assert read(source, "latin.txt") == "café"

    def test_encoding_applied_to_entries(self, mock_logger, temp_dir: Path):
        """Test archive entries are decoded with the configured encoding."""
        with zipfile.ZipFile(temp_dir / "data.zip", "w") as zf:
            zf.writestr("latin.txt", "café".encode("latin-1"))
        source = make_source(mock_logger, basePath=str(temp_dir), encoding="latin-1")
        assert read(source, "latin.txt") == "café"

    def test_unknown_encoding(self, mock_logger):
        """Test unknown encodings are rejected at init."""
        with pytest.raises(ValidationError, match="Unknown encoding"):
            make_source(mock_logger, basePath="/tmp", encoding="klingon-8")


class TestGetPath:
    """Tests for base path handling."""

    def test_absolute_base_path(self, mock_logger, archive_dir: Path):
        """Test queries are joined onto an absolute base path."""
        source = make_source(mock_logger, basePath=str(archive_dir))
        assert source.get_path("inner/b.txt") == str(archive_dir / "inner" / "b.txt")
        mock_logger.warning.assert_not_called()

    def test_relative_base_path(self, mock_logger, archive_dir: Path, monkeypatch):
        """Test a relative base path is resolved against the working directory."""
        monkeypatch.chdir(archive_dir.parent)
        source = make_source(mock_logger, basePath=archive_dir.name)

        assert read(source, "inner/b.txt") == "zipped b"
        mock_logger.warning.assert_called_once_with(
            "ZipFolderDataSource.basePath is not absolute", resolved=str(archive_dir)
        )

    def test_empty_base_path(self, mock_logger, archive_dir: Path, monkeypatch):
        """Test a missing base path means the working directory."""
        monkeypatch.chdir(archive_dir)
        source = make_source(mock_logger)

        assert read(source, "a.txt") == "plain a"
        mock_logger.warning.assert_called_once_with(
            "ZipFolderDataSource.basePath is empty", resolved=str(archive_dir)
        )


class TestLifecycle:
    """Tests for the context manager protocol."""

    def test_context_manager(self, mock_logger, archive_dir: Path):
        """Test the data source can be used in a with block."""
        with make_source(mock_logger, basePath=str(archive_dir)) as source:
            assert read(source, "a.txt") == "plain a"
