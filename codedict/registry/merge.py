"""Merge a provider snapshot into the registry.

Rows are matched on the stable player code only. Matched rows get their
names and the current season pair overwritten; unmatched players are
appended in snapshot order. Nothing is ever removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from codedict.config import RegistryColumns
from codedict.errors import DataQualityWarning
from codedict.registry.codes import normalize_code
from codedict.registry.season import SeasonColumns
from codedict.registry.store import RegistryTable, Row
from codedict.registry.teams import TeamCodeResolver
from codedict.shared.enums import WarningKind
from codedict.shared.logging import emit_event

if TYPE_CHECKING:
    from codedict.providers.fpl.types import PlayerElement

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    updated: int = 0
    added: int = 0
    new_codes: List[str] = field(default_factory=list)
    warnings: List[DataQualityWarning] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.updated + self.added


def build_code_index(table: RegistryTable, code_column: str) -> Dict[str, Row]:
    """Map normalized code -> row. The first row wins if a code repeats."""
    index: Dict[str, Row] = {}
    duplicates: List[str] = []
    for row in table.rows:
        code = normalize_code(row.get(code_column))
        if not code:
            continue
        if code in index:
            duplicates.append(code)
            continue
        index[code] = row
    if duplicates:
        logger.warning({"registry_duplicate_codes": sorted(set(duplicates))})
    return index


def _warn(result: MergeResult, kind: WarningKind, message: str, **context) -> None:
    warning = DataQualityWarning(kind=kind, message=message, context=context)
    result.warnings.append(warning)
    logger.warning(warning.to_dict())


def merge_snapshot(
    table: RegistryTable,
    elements: Iterable["PlayerElement"],
    resolver: TeamCodeResolver,
    season: SeasonColumns,
    *,
    columns: Optional[RegistryColumns] = None,
) -> MergeResult:
    """Apply every snapshot record to ``table`` in input order.

    ``table`` must already carry the ``season`` columns (see
    ``evolve_schema``); the fixed columns are added if a hand-made registry
    lacks them.
    """
    columns = columns or RegistryColumns()
    for name in columns.fixed():
        table.add_column(name)
    for name in season:
        table.add_column(name)

    index = build_code_index(table, columns.code)
    result = MergeResult()

    for element in elements:
        code = normalize_code(element.stable_code)
        display_name = element.display_name
        team_name = resolver.resolve(element.team_code)
        if not team_name:
            _warn(
                result,
                WarningKind.UNRESOLVED_TEAM,
                f"Team code {element.team_code} for {display_name} could not be resolved.",
                code=code,
                team_code=element.team_code,
            )

        row = index.get(code)
        if row is None:
            row = table.new_row()
            row[columns.code] = code
            index[code] = row
            result.added += 1
            result.new_codes.append(code)
            emit_event(
                {
                    "event": "new_player",
                    "code": code,
                    "name": display_name,
                    "web_name": element.short_name,
                    "team": team_name,
                    "minutes": element.minutes_played,
                }
            )
        else:
            result.updated += 1

        row[columns.display_name] = display_name
        row[columns.short_name] = element.short_name
        row[season.provider_id] = str(element.provider_player_id)
        row[season.team] = team_name

        if element.minutes_played > 0 and not row.get(columns.external_id, "").strip():
            _warn(
                result,
                WarningKind.MISSING_EXTERNAL_ID,
                (
                    f"Player {display_name} ({element.short_name}, {team_name}) has >0 minutes "
                    f"but no {columns.external_id} ({element.minutes_played} mins)."
                ),
                code=code,
                minutes=element.minutes_played,
            )

    logger.info(
        {
            "merge_complete": {
                "updated": result.updated,
                "added": result.added,
                "warnings": len(result.warnings),
                "rows": len(table.rows),
            }
        }
    )
    return result


__all__ = [
    "MergeResult",
    "build_code_index",
    "merge_snapshot",
]
