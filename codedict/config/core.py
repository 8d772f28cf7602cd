from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


FPL_BOOTSTRAP_URL = "https://fantasy.premierleague.com/api/bootstrap-static/"

_LAST_YAML_PATH: Optional[str] = None


class RegistryColumns(BaseModel):
    """Header names of the fixed registry columns and the season-pair prefixes."""

    code: str = "Code"
    display_name: str = "FPL_Name"
    short_name: str = "Web_Name"
    external_id: str = "Understat_ID"
    external_name: str = "Understat_Name"
    provider_id_prefix: str = "FPL_ID_"
    team_prefix: str = "Team_"

    def fixed(self) -> list[str]:
        return [self.code, self.display_name, self.short_name, self.external_id, self.external_name]


class RegistrySettings(BaseModel):
    path: str = "code_dict.csv"
    columns: RegistryColumns = Field(default_factory=RegistryColumns)


class FPLSettings(BaseModel):
    bootstrap_url: str = FPL_BOOTSTRAP_URL
    timeout_seconds: float = 30.0
    user_agent: str = "fpl-code-dict"

    @model_validator(mode="after")
    def _validate_timeout(self) -> "FPLSettings":
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return self


class CrossRefSettings(BaseModel):
    url: Optional[str] = None
    code_column: str = "code"
    id_column: str = "understat"
    name_column: Optional[str] = None
    timeout_seconds: float = 30.0

    @model_validator(mode="after")
    def _validate_timeout(self) -> "CrossRefSettings":
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return self


class TeamCodeSettings(BaseModel):
    known_codes_path: Optional[str] = None
    persist_discovered: bool = False


class StageSettings(BaseModel):
    merge: bool = True
    reconcile: bool = True
    reconcile_after_failed_merge: bool = True


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3001
    cache_max_age_seconds: int = 300
    route: Optional[str] = None

    @model_validator(mode="after")
    def _validate_port(self) -> "ServerSettings":
        if not 0 < self.port < 65536:
            raise ValueError("port must be between 1 and 65535")
        if self.cache_max_age_seconds < 0:
            raise ValueError("cache_max_age_seconds must be >= 0")
        if self.route is not None and (not self.route.startswith("/") or self.route == "/"):
            raise ValueError("route must start with '/' and name a file")
        return self


class LoggingSettings(BaseModel):
    json_logs: bool = False
    level: str = "INFO"
    log_dir: Optional[str] = None
    events_retention_size: int = 1024 * 1024

    @model_validator(mode="before")
    @classmethod
    def _alias_json(cls, data: dict[str, object]) -> dict[str, object]:
        if isinstance(data, dict) and "json" in data and "json_logs" not in data:
            data = dict(data)
            data["json_logs"] = data.pop("json")
        return data

    @model_validator(mode="after")
    def _validate_level(self) -> "LoggingSettings":
        level = self.level.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level: {self.level!r}")
        self.level = level
        return self


class Settings(BaseSettings):
    """Run configuration passed explicitly into every component.

    Precedence, lowest first: field defaults, YAML file, ``CODEDICT_*``
    environment variables (``__`` separates nested keys), keyword overrides.
    """

    model_config = SettingsConfigDict(
        env_prefix="CODEDICT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    fpl: FPLSettings = Field(default_factory=FPLSettings)
    crossref: CrossRefSettings = Field(default_factory=CrossRefSettings)
    teams: TeamCodeSettings = Field(default_factory=TeamCodeSettings)
    stages: StageSettings = Field(default_factory=StageSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="before")
    @classmethod
    def _apply_yaml_overrides(cls, data: Any) -> Any:
        overrides = _load_yaml_overrides()
        if not overrides:
            return data
        if isinstance(data, dict):
            return _deep_merge(overrides, data)
        return overrides

    def registry_path(self) -> Path:
        return Path(self.registry.path).expanduser()

    def serve_route(self) -> str:
        if self.server.route:
            return self.server.route
        return "/" + self.registry_path().name


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def last_yaml_path() -> Optional[str]:
    return _LAST_YAML_PATH


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _load_yaml_overrides() -> Dict[str, Any]:
    candidates: list[Path] = []
    yaml_path = last_yaml_path()
    if yaml_path:
        candidates.append(Path(yaml_path).expanduser().resolve())
    env_path = os.getenv("CODEDICT_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser().resolve())
    candidates.append(_project_root() / "config" / "codedict.yaml")

    for path in candidates:
        if not path.exists():
            continue
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top-level YAML value must be a mapping")
        return data
    return {}


def load_settings(yaml_path: str | os.PathLike[str] | None = None, **overrides: Any) -> Settings:
    """Build settings, remembering ``yaml_path`` as the YAML layer for this process."""
    global _LAST_YAML_PATH
    if yaml_path is not None:
        path = Path(yaml_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"config file not found: {path}")
        _LAST_YAML_PATH = str(path)
    return Settings(**overrides)


__all__ = [
    "FPL_BOOTSTRAP_URL",
    "RegistryColumns",
    "RegistrySettings",
    "FPLSettings",
    "CrossRefSettings",
    "TeamCodeSettings",
    "StageSettings",
    "ServerSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
    "last_yaml_path",
    "_project_root",
]
