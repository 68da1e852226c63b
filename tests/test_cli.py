"""
Tests for the command line entry point.
"""

import json
import logging

import pytest

from directory_crawler.main import EXIT_CONFIG_ERROR, EXIT_CRAWL_ERROR, EXIT_OK, main


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    for name in ("PARALLELISM", "FILTER", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"DIRECTORY_CRAWLER_{name}", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestMain:
    """Test the directory-crawler command."""

    def test_lists_matching_files_with_sizes(self, crawl_tree, capsys):
        exit_code = main([str(crawl_tree / "many-files"), "--filter", "t*.txt", "--log-level", "ERROR"])

        out = capsys.readouterr().out.splitlines()
        assert exit_code == EXIT_OK
        assert sorted(out) == sorted([
            f"{crawl_tree / 'many-files' / 'three.txt'}\t5",
            f"{crawl_tree / 'many-files' / 'two.txt'}\t3",
        ])

    def test_archive_entries_are_prefixed_with_archive_path(self, crawl_tree, capsys):
        exit_code = main([str(crawl_tree / "containing-zip"), "--filter", "three.txt", "--log-level", "ERROR"])

        out = capsys.readouterr().out.splitlines()
        archive = crawl_tree / "containing-zip" / "archive.zip"
        assert exit_code == EXIT_OK
        assert out == [f"{archive}!nested/three.txt\t5"]

    def test_missing_path_exits_with_crawl_error(self, tmp_path, capsys):
        exit_code = main([str(tmp_path / "nowhere"), "--log-level", "CRITICAL"])

        assert exit_code == EXIT_CRAWL_ERROR
        assert capsys.readouterr().out == ""

    def test_invalid_parallel_exits_with_config_error(self, tmp_path, capsys):
        exit_code = main([str(tmp_path), "--parallel", "0"])

        assert exit_code == EXIT_CONFIG_ERROR
        assert "parallelism must be a positive integer" in capsys.readouterr().err

    def test_configuration_file_is_used(self, crawl_tree, tmp_path, capsys):
        config_file = tmp_path / "crawler.json"
        config_file.write_text(json.dumps({
            "crawler": {"parallelism": 1, "filter_pattern": "recursive.txt"},
            "logging": {"log_level": "ERROR"}
        }))

        exit_code = main([str(crawl_tree), "--config", str(config_file)])

        out = capsys.readouterr().out.splitlines()
        assert exit_code == EXIT_OK
        assert out == [f"{crawl_tree / 'recursive-directories' / 'sub-directory' / 'recursive.txt'}\t9"]
