# SPDX-License-Identifier: MIT
"""Tests for configuration loading, logging setup and the CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from modindex_api.cli import cli
from modindex_api.config import APIConfig
from modindex_api.logging import configure_logging


class TestAPIConfig:
    """Tests for APIConfig loading."""

    def test_defaults(self):
        config = APIConfig()
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.auth.admin_tokens == frozenset()
        assert config.logging.level == "info"

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MODINDEX_PORT", "9000")
        monkeypatch.setenv("MODINDEX_DATABASE_URL", "data/mods.db")
        monkeypatch.setenv("MODINDEX_DOWNLOADS_PATH", "data/downloads")
        monkeypatch.setenv("MODINDEX_ADMIN_TOKENS", "one, two,,")
        monkeypatch.setenv("MODINDEX_LOG_JSON", "true")

        config = APIConfig.from_env()

        assert config.server.port == 9000
        assert config.database.url == "data/mods.db"
        assert config.storage.downloads_path == "data/downloads"
        assert config.auth.admin_tokens == frozenset({"one", "two"})
        assert config.logging.json is True

    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "port": 7000,
                    "database_url": "sqlite:///mods.db",
                    "downloads_path": "downloads",
                    "log_level": "debug",
                    "admin_keys": ["admin_password"],
                }
            )
        )

        config = APIConfig.from_file(path)

        assert config.server.port == 7000
        assert config.server.host == "127.0.0.1"
        assert config.database.url == "sqlite:///mods.db"
        assert config.storage.downloads_path == "downloads"
        assert config.logging.level == "debug"
        assert config.auth.admin_tokens == frozenset({"admin_password"})

    @pytest.mark.parametrize("content", ["[]", '{"admin_keys": "secret"}', '{"admin_keys": [1]}'])
    def test_from_file_rejects_bad_shapes(self, tmp_path: Path, content):
        path = tmp_path / "config.json"
        path.write_text(content)
        with pytest.raises(ValueError):
            APIConfig.from_file(path)


class TestLogging:
    """Tests for configure_logging."""

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("chatty")

    @pytest.mark.parametrize("json_log", [False, True])
    def test_configures(self, json_log):
        configure_logging("debug", json_log=json_log)


class TestCLI:
    """Tests for the mod-index command."""

    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "serve" in result.output
        assert "reconcile" in result.output

    def test_missing_config_file(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["reconcile", str(tmp_path / "absent.json")])
        assert result.exit_code != 0

    def test_invalid_config_file(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("[]")
        result = CliRunner().invoke(cli, ["reconcile", str(path)])
        assert result.exit_code == 1
        assert "Could not load" in result.output

    def test_reconcile(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "database_url": str(tmp_path / "mods.db"),
                    "downloads_path": str(tmp_path / "downloads"),
                    "admin_keys": [],
                }
            )
        )
        result = CliRunner().invoke(cli, ["reconcile", str(path)])
        assert result.exit_code == 0, result.output
        assert "Checked 0 entries, removed 0" in result.output

    def test_config_file_ignores_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("MODINDEX_PORT", "not-a-port")
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "database_url": str(tmp_path / "mods.db"),
                    "downloads_path": str(tmp_path / "downloads"),
                }
            )
        )

        result = CliRunner().invoke(cli, ["reconcile", str(path)])

        assert result.exit_code == 0, result.output

    def test_app_module_builds_nothing_on_import(self):
        import modindex_api.app

        assert not hasattr(modindex_api.app, "app")
        assert callable(modindex_api.app.create_app)
