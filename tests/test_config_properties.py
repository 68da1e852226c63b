"""
Property-based tests for configuration loading and validation.
"""

import json

import pytest
from hypothesis import given, strategies as st, settings, HealthCheck

from directory_crawler.config import (
    ConfigManager,
    CrawlerConfig,
    LoggingConfig,
    SystemConfig,
    get_config
)
from directory_crawler.utils.errors import ConfigurationError, ValidationError


@st.composite
def system_config_strategy(draw):
    """Generate valid configuration dictionaries."""
    return {
        "crawler": {
            "parallelism": draw(st.integers(min_value=1, max_value=64)),
            "filter_pattern": draw(st.sampled_from(["*", "*.txt", "three.txt", "**/*.csv", "[ab]*.log"])),
            "chunk_size": draw(st.integers(min_value=1, max_value=1024 * 1024))
        },
        "logging": {
            "log_level": draw(st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])),
            "log_file": draw(st.one_of(st.none(), st.just("logs/crawler.log"))),
            "json_output": draw(st.booleans()),
            "retention_days": draw(st.integers(min_value=1, max_value=365))
        }
    }


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("PARALLELISM", "FILTER", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"DIRECTORY_CRAWLER_{name}", raising=False)


class TestCrawlerConfig:
    """Test crawler configuration validation."""

    def test_defaults(self):
        config = CrawlerConfig()
        assert config.parallelism == 5
        assert config.filter_pattern == "*"

    @pytest.mark.parametrize("changes", [
        {"parallelism": 0},
        {"parallelism": -3},
        {"parallelism": "5"},
        {"filter_pattern": ""},
        {"chunk_size": 0},
    ])
    def test_invalid_values_are_rejected(self, changes):
        with pytest.raises(ValidationError) as excinfo:
            CrawlerConfig(**changes)
        assert excinfo.value.details["errors"]

    def test_replace_validates_again(self):
        with pytest.raises(ValidationError):
            CrawlerConfig().replace(parallelism=0)
        assert CrawlerConfig().replace(parallelism=2).parallelism == 2


class TestConfigManager:
    """Test loading configuration from files and the environment."""

    @given(config_data=system_config_strategy())
    @settings(max_examples=20, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_file_round_trip(self, tmp_path_factory, config_data):
        """Any valid configuration loads, exports and saves unchanged."""
        directory = tmp_path_factory.mktemp("config")
        config_file = directory / "config.json"
        config_file.write_text(json.dumps(config_data))

        manager = ConfigManager(str(config_file))
        config = manager.load_config()

        assert config.crawler.parallelism == config_data["crawler"]["parallelism"]
        assert config.crawler.filter_pattern == config_data["crawler"]["filter_pattern"]
        assert config.logging.log_level == config_data["logging"]["log_level"]
        assert manager.export_config() == config_data

        saved = directory / "saved.json"
        manager.save_config(str(saved))
        assert json.loads(saved.read_text()) == config_data

    def test_defaults_without_file(self):
        config = get_config()
        assert isinstance(config, SystemConfig)
        assert config.crawler == CrawlerConfig()
        assert config.logging == LoggingConfig()

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"crawler": {"parallelism": 3}}))
        monkeypatch.setenv("DIRECTORY_CRAWLER_PARALLELISM", "9")
        monkeypatch.setenv("DIRECTORY_CRAWLER_FILTER", "*.csv")
        monkeypatch.setenv("DIRECTORY_CRAWLER_LOG_LEVEL", "debug")

        config = ConfigManager(str(config_file)).load_config()

        assert config.crawler.parallelism == 9
        assert config.crawler.filter_pattern == "*.csv"
        assert config.logging.log_level == "DEBUG"

    def test_non_integer_parallelism_env_is_rejected(self, monkeypatch):
        monkeypatch.setenv("DIRECTORY_CRAWLER_PARALLELISM", "many")
        with pytest.raises(ConfigurationError):
            ConfigManager().load_config()

    @pytest.mark.parametrize("config_data", [
        {"crawler": {"parallelism": 0}},
        {"crawler": {"filter_pattern": ""}},
        {"crawler": {"unknown": True}},
        {"logging": {"log_level": "VERBOSE"}},
        {"crawler": 5},
        {"extra": {}},
    ])
    def test_invalid_file_is_rejected(self, tmp_path, config_data):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with pytest.raises(ConfigurationError):
            ConfigManager(str(config_file)).load_config()

    def test_unparseable_file_is_rejected(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigurationError):
            ConfigManager(str(config_file)).load_config()

    def test_missing_file_is_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager(str(tmp_path / "absent.json")).load_config()

    def test_save_without_loaded_config_fails(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigManager().save_config(str(tmp_path / "out.json"))
