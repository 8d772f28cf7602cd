"""Provider team code -> display name.

The provider identifies a club by a numeric ``team_code`` that stays fixed
across seasons. Known codes form a small configuration artifact (the table
below, or a YAML file that replaces it); codes first seen in a live snapshot
are resolved for the current run and only written back when asked to.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from codedict.errors import StorageError
from codedict.shared.logging import emit_event

logger = logging.getLogger(__name__)


DEFAULT_TEAM_CODES: Dict[int, str] = {
    1: "Man Utd",
    2: "Leeds",
    3: "Arsenal",
    4: "Newcastle",
    6: "Spurs",
    7: "Aston Villa",
    8: "Chelsea",
    11: "Everton",
    13: "Leicester",
    14: "Liverpool",
    17: "Nott'm Forest",
    20: "Southampton",
    21: "West Ham",
    31: "Crystal Palace",
    36: "Brighton",
    39: "Wolves",
    40: "Ipswich",
    43: "Man City",
    49: "Sheffield Utd",
    54: "Fulham",
    56: "Sunderland",
    90: "Burnley",
    91: "Bournemouth",
    94: "Brentford",
    102: "Luton",
}


def _coerce_code(value: object) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def load_known_team_codes(path: Optional[str | os.PathLike[str]]) -> Dict[int, str]:
    """Known codes from a YAML ``code: name`` mapping, or the built-in table.

    A configured path that does not exist yet falls back to the built-in table
    so that ``persist_discovered`` can create it on the first run.
    """
    if not path:
        return dict(DEFAULT_TEAM_CODES)
    path = Path(path)
    if not path.exists():
        logger.debug({"known_team_codes": {"path": str(path), "status": "missing_using_defaults"}})
        return dict(DEFAULT_TEAM_CODES)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise StorageError(f"cannot read known team codes {path}: {exc}", path=str(path)) from exc
    if not isinstance(data, dict):
        raise StorageError(f"known team codes file must be a mapping: {path}", path=str(path))

    codes: Dict[int, str] = {}
    for raw_code, name in data.items():
        code = _coerce_code(raw_code)
        if code is None or not name:
            logger.warning({"known_team_codes_skip": {"path": str(path), "code": raw_code, "name": name}})
            continue
        codes[code] = str(name)
    return codes


def save_known_team_codes(path: str | os.PathLike[str], codes: Mapping[int, str]) -> None:
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump({int(k): str(v) for k, v in sorted(codes.items())}, f, allow_unicode=True, sort_keys=True)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise StorageError(f"cannot write known team codes {path}: {exc}", path=str(path)) from exc


class TeamCodeResolver:
    """Resolves team codes from known codes first, then live observations."""

    def __init__(self, known: Optional[Mapping[int, str]] = None) -> None:
        self.known: Dict[int, str] = dict(DEFAULT_TEAM_CODES if known is None else known)
        self.observed: Dict[int, str] = {}
        self.discovered: List[int] = []

    def observe(self, live_codes: Mapping[int, str]) -> List[int]:
        """Union the provider's current team list; return codes new to the known table."""
        new_codes: List[int] = []
        for raw_code, name in live_codes.items():
            code = _coerce_code(raw_code)
            if code is None:
                continue
            self.observed[code] = name
            if code in self.known or code in self.discovered:
                continue
            self.discovered.append(code)
            new_codes.append(code)
            emit_event({"event": "new_team_code", "code": code, "name": name})
        if new_codes:
            logger.info({"team_codes_discovered": len(new_codes), "codes": new_codes})
        return new_codes

    def resolve(self, code: object) -> str:
        key = _coerce_code(code)
        if key is None:
            return ""
        name = self.known.get(key)
        if name:
            return name
        return self.observed.get(key, "")

    def merged(self) -> Dict[int, str]:
        """Known codes plus every discovered code, for persisting."""
        merged = dict(self.known)
        for code in self.discovered:
            merged.setdefault(code, self.observed[code])
        return merged


__all__ = [
    "DEFAULT_TEAM_CODES",
    "TeamCodeResolver",
    "load_known_team_codes",
    "save_known_team_codes",
]
