"""Registry engine: CSV store, season schema, team codes, merge and reconcile."""

from .codes import normalize_code
from .store import RegistryTable, load_registry, save_registry
from .season import SeasonColumns, current_season, evolve_schema, season_columns
from .teams import DEFAULT_TEAM_CODES, TeamCodeResolver, load_known_team_codes, save_known_team_codes
from .merge import MergeResult, merge_snapshot
from .reconcile import ReconcileResult, reconcile_external_ids

__all__ = [
    "normalize_code",
    "RegistryTable",
    "load_registry",
    "save_registry",
    "SeasonColumns",
    "current_season",
    "evolve_schema",
    "season_columns",
    "DEFAULT_TEAM_CODES",
    "TeamCodeResolver",
    "load_known_team_codes",
    "save_known_team_codes",
    "MergeResult",
    "merge_snapshot",
    "ReconcileResult",
    "reconcile_external_ids",
]
