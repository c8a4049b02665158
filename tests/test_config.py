"""Tests for config: load priority, env overrides, timeouts, derived paths."""

import json
import os
from pathlib import Path
from unittest.mock import patch

from plugdesk.core.config import Config, _apply_settings, load_config


def _env(tmp_path, **extra):
    env = {"PLUGDESK_HOME": str(tmp_path / "home")}
    env.update(extra)
    return env


def _clean_environ():
    return {
        k: v
        for k, v in os.environ.items()
        if not k.startswith("PLUGDESK_")
    }


class TestConfigDefaults:
    def test_default_data_dir(self):
        c = Config()
        assert c.data_dir == Path.home() / ".plugdesk"

    def test_default_timeouts(self):
        c = Config()
        assert c.host_timeout == 30.0
        assert c.picker_timeout is None

    def test_default_notification_duration(self):
        assert Config().notification_duration_ms == 3000

    def test_derived_paths(self, tmp_path):
        c = Config(data_dir=tmp_path)
        assert c.plugins_dir == tmp_path / "plugins"
        assert c.settings_path == tmp_path / "settings.json"
        assert c.unpacked_path == tmp_path / "unpacked.json"
        assert c.log_path.parent == tmp_path

    def test_zero_timeout_means_unbounded(self):
        assert Config(host_timeout=0).host_timeout is None
        assert Config(host_timeout=-1).host_timeout is None

    def test_string_data_dir_is_path(self, tmp_path):
        assert Config(data_dir=str(tmp_path)).data_dir == tmp_path


class TestApplySettings:
    def test_reads_known_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps(
                {
                    "hostTimeout": 5,
                    "pickerTimeout": 60,
                    "notificationDuration": 5000,
                    "logLevel": "info",
                }
            )
        )
        c = Config()
        _apply_settings(c, path)
        assert c.host_timeout == 5.0
        assert c.picker_timeout == 60.0
        assert c.notification_duration_ms == 5000
        assert c.log_level == "INFO"

    def test_missing_file(self, tmp_path):
        c = Config()
        _apply_settings(c, tmp_path / "nope.json")
        assert c.host_timeout == 30.0

    def test_invalid_json_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("not json")
        c = Config()
        _apply_settings(c, path)
        assert c.host_timeout == 30.0

    def test_enabled_plugins_key_is_not_config(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"enabledPlugins": {"a": True}}))
        c = Config()
        _apply_settings(c, path)
        assert c.host_timeout == 30.0


class TestLoadConfig:
    def test_home_from_env(self, tmp_path):
        with patch.dict(os.environ, _env(tmp_path), clear=False):
            config = load_config()
        assert config.data_dir == tmp_path / "home"

    def test_cli_data_dir_beats_env(self, tmp_path):
        with patch.dict(os.environ, _env(tmp_path), clear=False):
            config = load_config(data_dir=tmp_path / "cli")
        assert config.data_dir == tmp_path / "cli"

    def test_settings_file_in_data_dir(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        (home / "settings.json").write_text(json.dumps({"hostTimeout": 7}))
        with patch.dict(os.environ, _clean_environ(), clear=True):
            config = load_config(data_dir=home)
        assert config.host_timeout == 7.0

    def test_env_timeout_beats_settings(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        (home / "settings.json").write_text(json.dumps({"hostTimeout": 7}))
        with patch.dict(os.environ, _env(tmp_path, PLUGDESK_HOST_TIMEOUT="12"), clear=False):
            config = load_config()
        assert config.host_timeout == 12.0

    def test_env_log_level(self, tmp_path):
        with patch.dict(os.environ, _env(tmp_path, PLUGDESK_LOG_LEVEL="info"), clear=False):
            config = load_config()
        assert config.log_level == "INFO"

    def test_verbose_forces_debug(self, tmp_path):
        with patch.dict(os.environ, _env(tmp_path, PLUGDESK_LOG_LEVEL="error"), clear=False):
            config = load_config(verbose=True)
        assert config.verbose is True
        assert config.log_level == "DEBUG"
