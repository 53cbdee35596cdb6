"""Shared pytest fixtures for fileiter tests."""
import os
import tempfile
import time
import zipfile
from pathlib import Path
from typing import Any, Dict, Generator
from unittest.mock import MagicMock

import pytest
import yaml

from fileiter.infrastructure import config_manager, logger


# A fixed point well in the past, used for "old" files
OLD_MTIME = time.time() - 10 * 24 * 3600


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scan_dir(temp_dir: Path) -> Path:
    """Create a directory tree to scan.

    Layout:
        scan/
            x1.log          5 bytes, ten days old
            x2.log          50 bytes, current
            notes.txt       11 bytes
            x3.log.tmp      20 bytes
            sub/
                x4.log      30 bytes
                deeper/
                    x5.log  40 bytes
    """
    scan = temp_dir / "scan"
    scan.mkdir()

    (scan / "x1.log").write_bytes(b"a" * 5)
    os.utime(scan / "x1.log", (OLD_MTIME, OLD_MTIME))
    (scan / "x2.log").write_bytes(b"b" * 50)
    (scan / "notes.txt").write_text("Hello World")
    (scan / "x3.log.tmp").write_bytes(b"c" * 20)

    (scan / "sub").mkdir()
    (scan / "sub" / "x4.log").write_bytes(b"d" * 30)
    (scan / "sub" / "deeper").mkdir()
    (scan / "sub" / "deeper" / "x5.log").write_bytes(b"e" * 40)

    return scan


@pytest.fixture
def archive_dir(temp_dir: Path) -> Path:
    """Create a base directory with a plain file and a zipped subdirectory.

    Layout:
        base/
            a.txt               "plain a"
            archive.zip         (a.txt -> "zipped a")
            inner/
                archive.zip     (b.txt -> "zipped b", c.csv -> "x,y")
            empty/
    """
    base = temp_dir / "base"
    base.mkdir()
    (base / "a.txt").write_text("plain a")
    with zipfile.ZipFile(base / "archive.zip", "w") as zf:
        zf.writestr("a.txt", "zipped a")

    inner = base / "inner"
    inner.mkdir()
    with zipfile.ZipFile(inner / "archive.zip", "w") as zf:
        zf.writestr("b.txt", "zipped b")
        zf.writestr("c.csv", "x,y\n1,2\n")

    (base / "empty").mkdir()
    return base


@pytest.fixture
def sample_config(scan_dir: Path, archive_dir: Path) -> Dict[str, Any]:
    """Provide a sample data-config document."""
    return {
        "fileiter": {
            "logging": {"level": "DEBUG", "file": None},
            "variables": {
                "dih": {"minimum_size": 10, "pattern": r"x.*\.log"},
            },
            "data_sources": {
                "exports": {
                    "type": "zip_folder",
                    "basePath": str(archive_dir),
                    "encoding": "utf-8",
                }
            },
            "entities": [
                {
                    "name": "logs",
                    "processor": "file_iterator",
                    "baseDir": str(scan_dir),
                    "fileName": "${dih.pattern}",
                    "biggerThan": "${dih.minimum_size}",
                },
                {
                    "name": "everything",
                    "baseDir": str(scan_dir),
                    "recursive": True,
                },
            ],
        }
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "data-config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger stand-in that records calls."""
    return MagicMock()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset global logger and config between tests."""
    yield
    logger._global_logger = None
    config_manager._global_config = None
