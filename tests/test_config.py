from pathlib import Path

import pytest

from api_workbench.config import DEFAULT_STORE_PATH, load_settings
from api_workbench.errors import ConfigError


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("API_WORKBENCH_STORE", raising=False)
        settings = load_settings(tmp_path / "none.yaml")
        assert settings.store_path == DEFAULT_STORE_PATH.expanduser()
        assert settings.log_level == "WARNING"
        assert settings.timeout is None

    def test_reads_yaml(self, tmp_path, monkeypatch):
        monkeypatch.delenv("API_WORKBENCH_STORE", raising=False)
        cfg = tmp_path / "config.yaml"
        cfg.write_text(f"store_path: {tmp_path / 'ws.json'}\nlog_level: debug\ntimeout: 2.5\n")
        settings = load_settings(cfg)
        assert settings.store_path == tmp_path / "ws.json"
        assert settings.log_level == "DEBUG"
        assert settings.timeout == 2.5

    def test_env_overrides_store(self, tmp_path, monkeypatch):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("store_path: /elsewhere.json\n")
        monkeypatch.setenv("API_WORKBENCH_STORE", str(tmp_path / "env.json"))
        assert load_settings(cfg).store_path == tmp_path / "env.json"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        monkeypatch.delenv("API_WORKBENCH_STORE", raising=False)
        cfg = tmp_path / "other.yaml"
        cfg.write_text("log_level: INFO\n")
        monkeypatch.setenv("API_WORKBENCH_CONFIG", str(cfg))
        assert load_settings().log_level == "INFO"

    def test_empty_file(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("")
        assert load_settings(cfg).log_level == "WARNING"

    @pytest.mark.parametrize("content", ["key: [broken\n", "- a\n- b\n", "log_level: LOUD\n", "timeout: soon\n"])
    def test_invalid_config(self, tmp_path, content):
        cfg = tmp_path / "config.yaml"
        cfg.write_text(content)
        with pytest.raises(ConfigError):
            load_settings(cfg)

    def test_expands_user(self, tmp_path, monkeypatch):
        monkeypatch.delenv("API_WORKBENCH_STORE", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        cfg = tmp_path / "config.yaml"
        cfg.write_text("store_path: ~/mine.json\n")
        assert load_settings(cfg).store_path == Path(tmp_path) / "mine.json"
