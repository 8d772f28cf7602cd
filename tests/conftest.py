"""Shared fixtures for registry tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List

import pytest

import codedict.config.core as config_core
from codedict.providers.fpl.types import BootstrapSnapshot, PlayerElement, TeamEntry
from codedict.registry.store import RegistryTable

REGISTRY_HEADER = ["Code", "FPL_Name", "Web_Name", "Understat_ID", "Understat_Name"]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep host env vars and earlier ``load_settings`` calls out of each test."""
    monkeypatch.setattr(config_core, "_LAST_YAML_PATH", None)
    for key in list(os.environ):
        if key.startswith("CODEDICT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CODEDICT_TEST_MODE", "true")


def write_registry(path: Path, header: List[str], rows: List[List[str]]) -> Path:
    lines = [",".join(header)] + [",".join(row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def make_element(
    code: int,
    *,
    id: int = 1,
    first_name: str = "First",
    second_name: str = "Last",
    web_name: str = "Last",
    team_code: int = 3,
    minutes: int = 0,
) -> PlayerElement:
    return PlayerElement.model_validate(
        {
            "code": code,
            "id": id,
            "first_name": first_name,
            "second_name": second_name,
            "web_name": web_name,
            "team_code": team_code,
            "minutes": minutes,
        }
    )


def bootstrap_payload(elements: List[Dict[str, Any]], teams: List[Dict[str, Any]] | None = None) -> Dict[str, Any]:
    if teams is None:
        teams = [{"code": 3, "id": 1, "name": "Arsenal", "short_name": "ARS"}]
    return {"events": [], "elements": elements, "teams": teams}


@pytest.fixture
def registry_table() -> RegistryTable:
    table = RegistryTable(columns=list(REGISTRY_HEADER))
    for code, name, web, understat in (
        ("100", "Bukayo Saka", "Saka", "7322"),
        ("200", "Mohamed Salah", "M.Salah", ""),
    ):
        row = table.new_row()
        row.update({"Code": code, "FPL_Name": name, "Web_Name": web, "Understat_ID": understat})
    return table


@pytest.fixture
def registry_file(tmp_path) -> Path:
    return write_registry(
        tmp_path / "code_dict.csv",
        REGISTRY_HEADER,
        [
            ["100", "Bukayo Saka", "Saka", "7322", ""],
            ["200", "Mohamed Salah", "M.Salah", "", ""],
        ],
    )


class FakeFPLClient:
    """Stands in for ``FPLClient``; returns a fixed snapshot or raises."""

    def __init__(self, snapshot: BootstrapSnapshot | None = None, error: Exception | None = None) -> None:
        self.snapshot = snapshot
        self.error = error
        self.calls = 0
        self.closed = False

    async def fetch_bootstrap(self) -> BootstrapSnapshot:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.snapshot

    async def close(self) -> None:
        self.closed = True


class FakeCrossRefClient:
    def __init__(self, mapping=None, error: Exception | None = None) -> None:
        self.mapping = mapping
        self.error = error
        self.calls = 0

    async def fetch_mapping(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.mapping

    async def close(self) -> None:
        pass


def snapshot_of(*elements: PlayerElement, teams: List[TeamEntry] | None = None) -> BootstrapSnapshot:
    if teams is None:
        teams = [TeamEntry(code=3, name="Arsenal", id=1, short_name="ARS")]
    return BootstrapSnapshot(elements=list(elements), teams=teams)
