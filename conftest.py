"""
Pytest configuration and fixtures for directory crawler tests.
"""

import logging
import os
import zipfile
from pathlib import Path

import pytest
from hypothesis import settings, Verbosity

# Configure Hypothesis for faster test runs
settings.register_profile("fast", max_examples=10, deadline=5000, verbosity=Verbosity.quiet)
settings.register_profile("thorough", max_examples=100, deadline=30000, verbosity=Verbosity.normal)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


ZIP_ENTRIES = {
    "nested/": None,
    "one.txt": b"one",
    "two.txt": b"two",
    "nested/three.txt": b"three",
    "four.txt": b"four",
    "five.txt": b"five",
    "six.txt": b"six",
}


def write_zip(path: Path, entries=None) -> Path:
    """Write a ZIP file; a ``None`` payload creates a directory entry."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, payload in (entries or ZIP_ENTRIES).items():
            if payload is None:
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, payload)
    return path


@pytest.fixture
def zip_factory():
    """Expose ``write_zip`` to tests."""
    return write_zip


@pytest.fixture
def crawl_tree(tmp_path):
    """
    Build the sample trees used by the crawler tests.

    Layout::

        empty-directory/
        one-file/one.txt
        recursive-directories/sub-directory/recursive.txt
        many-files/{one,two,three,four,five,six}.txt
        containing-zip/archive.zip
    """
    (tmp_path / "empty-directory").mkdir()

    (tmp_path / "one-file").mkdir()
    (tmp_path / "one-file" / "one.txt").write_text("one")

    nested = tmp_path / "recursive-directories" / "sub-directory"
    nested.mkdir(parents=True)
    (nested / "recursive.txt").write_text("recursive")

    many = tmp_path / "many-files"
    many.mkdir()
    for name in ("one", "two", "three", "four", "five", "six"):
        (many / f"{name}.txt").write_text(name)

    write_zip(tmp_path / "containing-zip" / "archive.zip")

    return tmp_path


@pytest.fixture
def symlink_tree(crawl_tree):
    """A directory holding a symlink to ``one-file/one.txt``."""
    directory = crawl_tree / "symbolic-link"
    directory.mkdir()
    try:
        os.symlink(crawl_tree / "one-file" / "one.txt", directory / "one.txt")
    except (OSError, NotImplementedError) as e:
        pytest.skip(f"Symbolic links not supported: {e}")
    return directory


def pytest_configure(config):
    """Configure pytest with custom settings."""
    logging.getLogger("directory_crawler").setLevel(logging.WARNING)
    logging.getLogger("hypothesis").setLevel(logging.WARNING)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Mark property-based tests
        if "properties" in item.fspath.basename or any(
            marker.name == "given" for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.property)

        if "crawler" in item.fspath.basename or "archive" in item.fspath.basename:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
