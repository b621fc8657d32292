"""Tests for environment-driven configuration."""

from datetime import timedelta
from pathlib import Path

import pytest

from config import Config


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "MEMORY_DIR", "PROGRESS_DIR", "TRACKED_PROJECTS", "GITHUB_TOKEN", "ACTIVITY_LIMIT",
        "ACTIVITY_MAX_AGE_DAYS", "ACTIVITY_UTC_OFFSET_HOURS", "LOG_LEVEL", "LOG_FORMAT",
        "ENABLE_LOGFIRE", "MAX_WORKERS",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestConfigLoad:
    def test_defaults(self, clean_env):
        config = Config.load()

        assert config.memory_dir == Path("memory")
        assert config.activity_max_age_days == 7
        assert config.activity_limit == 50
        assert config.activity_tz.utcoffset(None) == timedelta(hours=-5)
        assert config.tracked_projects == []
        assert config.enable_logfire is False
        assert config.validate() is None

    def test_env_overrides(self, clean_env):
        clean_env.setenv("TRACKED_PROJECTS", " acme/site , https://github.com/acme/api ,, ")
        clean_env.setenv("ACTIVITY_LIMIT", "20")
        clean_env.setenv("ACTIVITY_UTC_OFFSET_HOURS", "5.5")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("ENABLE_LOGFIRE", "yes")

        config = Config.load()

        assert config.tracked_projects == ["acme/site", "https://github.com/acme/api"]
        assert config.activity_limit == 20
        assert config.activity_tz.utcoffset(None) == timedelta(hours=5, minutes=30)
        assert config.log_level == "DEBUG"
        assert config.enable_logfire is True

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("ACTIVITY_LIMIT", "many")
        with pytest.raises(ValueError, match="ACTIVITY_LIMIT"):
            Config.load()


class TestConfigValidate:
    @pytest.mark.parametrize("overrides,fragment", [
        ({"activity_limit": 0}, "ACTIVITY_LIMIT"),
        ({"activity_max_age_days": -1}, "ACTIVITY_MAX_AGE_DAYS"),
        ({"activity_utc_offset_hours": 30}, "ACTIVITY_UTC_OFFSET_HOURS"),
        ({"max_workers": 0}, "MAX_WORKERS"),
        ({"log_level": "LOUD"}, "LOG_LEVEL"),
        ({"log_format": "xml"}, "LOG_FORMAT"),
    ])
    def test_errors(self, overrides, fragment):
        error = Config(**overrides).validate()
        assert error is not None and fragment in error
