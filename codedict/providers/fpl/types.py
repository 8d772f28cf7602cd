"""Models for the two parts of the FPL bootstrap payload that the registry reads."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class PlayerElement(BaseModel):
    """One entry of ``elements``; field names follow the registry, aliases the API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    stable_code: int = Field(alias="code")
    provider_player_id: int = Field(alias="id")
    first_name: str = ""
    second_name: str = ""
    short_name: str = Field(default="", alias="web_name")
    team_code: int
    minutes_played: int = Field(default=0, alias="minutes")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.second_name}"


class TeamEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    code: int
    name: str
    id: int | None = None
    short_name: str | None = None


class BootstrapSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    elements: List[PlayerElement] = Field(default_factory=list)
    teams: List[TeamEntry] = Field(default_factory=list)

    def team_names(self) -> Dict[int, str]:
        return {team.code: team.name for team in self.teams}


__all__ = [
    "PlayerElement",
    "TeamEntry",
    "BootstrapSnapshot",
]
