"""Tests for config/core.py - settings layering."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

import codedict.config.core as config_core
from codedict.config import Settings, load_settings


class TestDefaults:
    """Default settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.registry.path == "code_dict.csv"
        assert settings.registry.columns.external_id == "Understat_ID"
        assert settings.fpl.bootstrap_url.endswith("/api/bootstrap-static/")
        assert settings.crossref.url is None
        assert settings.server.port == 3001
        assert settings.stages.merge and settings.stages.reconcile
        assert settings.teams.persist_discovered is False

    def test_serve_route_follows_registry_file_name(self):
        settings = Settings(registry={"path": "/data/registry.csv"})
        assert settings.serve_route() == "/registry.csv"

    def test_explicit_route_wins(self):
        settings = Settings(server={"route": "/players.csv"})
        assert settings.serve_route() == "/players.csv"


class TestValidation:
    """Validators on sub-models."""

    @pytest.mark.parametrize("route", ["/", "players.csv"])
    def test_bad_route_rejected(self, route):
        with pytest.raises(ValidationError):
            Settings(server={"route": route})

    def test_log_level_is_normalized(self):
        assert Settings(logging={"level": " debug "}).logging.level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(logging={"level": "verbose"})

    def test_bad_port_rejected(self):
        with pytest.raises(ValidationError):
            Settings(server={"port": 0})

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(fpl={"timeout_seconds": 0})

    def test_logging_json_alias(self):
        assert Settings(logging={"json": True}).logging.json_logs is True


class TestLayering:
    """YAML, environment and keyword override precedence."""

    def test_environment_nested_keys(self, monkeypatch):
        monkeypatch.setenv("CODEDICT_REGISTRY__PATH", "/tmp/env.csv")
        monkeypatch.setenv("CODEDICT_CROSSREF__URL", "https://example.com/ids.csv")
        settings = Settings()
        assert settings.registry.path == "/tmp/env.csv"
        assert settings.crossref.url == "https://example.com/ids.csv"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "codedict.yaml"
        path.write_text(
            "registry:\n  path: /data/code_dict.csv\nserver:\n  port: 8080\nlogging:\n  json: true\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.registry.path == "/data/code_dict.csv"
        assert settings.server.port == 8080
        assert settings.server.host == "0.0.0.0"
        assert settings.logging.json_logs is True
        assert config_core.last_yaml_path() == str(path)

    def test_environment_beats_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "codedict.yaml"
        path.write_text("server:\n  port: 8080\n  host: 127.0.0.1\n", encoding="utf-8")
        monkeypatch.setenv("CODEDICT_SERVER__PORT", "9090")
        settings = load_settings(path)
        assert settings.server.port == 9090
        assert settings.server.host == "127.0.0.1"

    def test_overrides_beat_yaml(self, tmp_path):
        path = tmp_path / "codedict.yaml"
        path.write_text("stages:\n  merge: true\n  reconcile: true\n", encoding="utf-8")
        settings = load_settings(path, stages={"merge": False})
        assert settings.stages.merge is False
        assert settings.stages.reconcile is True

    def test_config_env_var_points_at_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "other.yaml"
        path.write_text("crossref:\n  url: https://example.com/ids.csv\n", encoding="utf-8")
        monkeypatch.setenv("CODEDICT_CONFIG", str(path))
        assert Settings().crossref.url == "https://example.com/ids.csv"

    def test_missing_yaml_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_non_mapping_yaml_raises(self, tmp_path):
        path = tmp_path / "codedict.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)
