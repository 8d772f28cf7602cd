"""Season tags and the season-pair columns they add to the registry."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, NamedTuple, Optional

from codedict.registry.store import RegistryTable

logger = logging.getLogger(__name__)

# Months are 0-based here: Jan..Jun (0..5) still belong to the season that
# started the previous calendar year.
SEASON_ROLLOVER_MONTH_INDEX = 6


class SeasonColumns(NamedTuple):
    provider_id: str
    team: str


def current_season(now: Optional[datetime] = None) -> str:
    """Return the season tag for ``now``, e.g. ``"2024_25"``."""
    now = now or datetime.now()
    start_year = now.year
    if now.month - 1 < SEASON_ROLLOVER_MONTH_INDEX:
        start_year -= 1
    return f"{start_year}_{(start_year + 1) % 100:02d}"


def season_columns(
    season: str,
    *,
    provider_id_prefix: str = "FPL_ID_",
    team_prefix: str = "Team_",
) -> SeasonColumns:
    """Column names for a season tag: ``2024_25`` -> ``FPL_ID_2024-25``, ``Team_2024-25``."""
    label = season.replace("_", "-")
    return SeasonColumns(provider_id=f"{provider_id_prefix}{label}", team=f"{team_prefix}{label}")


def evolve_schema(table: RegistryTable, columns: SeasonColumns) -> List[str]:
    """Append the season columns missing from ``table``; return the names added.

    Existing columns keep their order and every row ends up with a value for
    every column. Running it again for the same season changes nothing.
    """
    added: List[str] = []
    for name in columns:
        if table.add_column(name):
            added.append(name)
    # Rows appended by hand may predate earlier schema changes.
    for row in table.rows:
        for name in table.columns:
            row.setdefault(name, "")
    if added:
        logger.info({"season_columns_added": added})
    return added


__all__ = [
    "SEASON_ROLLOVER_MONTH_INDEX",
    "SeasonColumns",
    "current_season",
    "season_columns",
    "evolve_schema",
]
