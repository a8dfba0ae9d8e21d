"""Tests for DeployConfig loading."""

from __future__ import annotations

import json
from pathlib import Path

from htdeploy.config import CONFIG_ENV, DeployConfig


class TestDeployConfig:
    def test_defaults(self):
        config = DeployConfig()
        assert config.manager_address == "10.0.99.100:60000"
        assert config.user == "yuval"
        assert config.ssh_port == 22
        assert Path(config.service_template).is_file()
        assert Path(config.network_file).is_file()
        assert Path(config.remote_script).is_file()

    def test_load_ignores_unknown_keys(self, tmp_path):
        path = tmp_path / "deploy.json"
        path.write_text(json.dumps({
            "manager_address": "192.168.1.5:61000",
            "user": "pi",
            "not_a_field": True,
        }))
        config = DeployConfig.load(path)
        assert config.manager_address == "192.168.1.5:61000"
        assert config.user == "pi"
        assert not hasattr(config, "not_a_field")

    def test_load_missing_file_uses_defaults(self, tmp_path):
        config = DeployConfig.load(tmp_path / "absent.json")
        assert config == DeployConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "deploy.json"
        DeployConfig(user="pi", ssh_port=2222).save(path)
        config = DeployConfig.load(path)
        assert config.user == "pi"
        assert config.ssh_port == 2222

    def test_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "deploy.json"
        path.write_text(json.dumps({"user": "kiosk"}))
        monkeypatch.setenv(CONFIG_ENV, str(path))
        assert DeployConfig.from_env().user == "kiosk"

    def test_from_env_unset(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        assert DeployConfig.from_env() == DeployConfig()
