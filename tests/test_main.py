"""Tests for the entry point's configuration selection."""

import os
from unittest.mock import patch

import pytest

from quakedash.core.config import Config
from quakedash.main import _get_config


class TestGetConfig:
    """Tests for _get_config()."""

    @pytest.mark.parametrize(
        "name, value, attribute, expected",
        [
            ("QUAKEDASH_TIMELINE_LIMIT", "100", "timeline_limit", 100),
            ("QUAKEDASH_TOP_COUNTRIES", "5", "top_countries_limit", 5),
            ("QUAKEDASH_TIMEZONE", "Asia/Tokyo", "display_timezone", "Asia/Tokyo"),
            ("QUAKEDASH_FEED_BASE_URL", "http://feeds.local", "feed_base_url", "http://feeds.local"),
        ],
    )
    def test_any_env_variable_selects_env_config(self, tmp_path, monkeypatch, name, value, attribute, expected):
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, {name: value}, clear=True):
            config = _get_config()

        assert getattr(config, attribute) == expected

    def test_config_path_wins_over_env(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("timeline_limit: 100\n")

        env = {"CONFIG_PATH": str(path), "QUAKEDASH_TOP_COUNTRIES": "5"}
        with patch.dict(os.environ, env, clear=True):
            config = _get_config()

        assert config.timeline_limit == 100
        assert config.top_countries_limit == 15

    def test_defaults_without_file_or_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, {}, clear=True):
            assert _get_config() == Config()
