"""Sequential registry sync pipeline.

Two stages run one after another, each turning its own failure into a
``StageResult`` instead of raising:

- merge: fetch bootstrap -> load registry -> evolve season columns -> merge
  players -> save.
- reconcile: fetch cross-reference CSV -> reconcile external ids -> save only
  if something changed.

A stage that completed keeps its write even if a later stage fails.

Usage:
    settings = load_settings()
    summary = await RegistrySync(settings).run()
    sys.exit(summary.exit_code)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from codedict.config import Settings
from codedict.errors import CodeDictError, DataQualityWarning, StorageError
from codedict.providers.crossref import CrossRefClient
from codedict.providers.fpl import FPLClient
from codedict.registry.merge import merge_snapshot
from codedict.registry.reconcile import reconcile_external_ids
from codedict.registry.season import current_season, evolve_schema, season_columns
from codedict.registry.store import RegistryTable, load_registry, save_registry
from codedict.registry.teams import TeamCodeResolver, load_known_team_codes, save_known_team_codes
from codedict.shared.enums import StageStatus
from codedict.shared.logging import emit_event

logger = logging.getLogger(__name__)

MERGE_STAGE = "merge"
RECONCILE_STAGE = "reconcile"


@dataclass
class StageResult:
    """Outcome of one pipeline stage: counts on success, error text on failure."""

    name: str
    status: StageStatus
    counts: Dict[str, int] = field(default_factory=dict)
    warnings: List[DataQualityWarning] = field(default_factory=list)
    error: Optional[str] = None
    reason: Optional[str] = None
    wrote: bool = False
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status != StageStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status.value,
            "counts": dict(self.counts),
            "warnings": len(self.warnings),
            "wrote": self.wrote,
            "duration_seconds": round(self.duration_seconds, 3),
        }
        if self.error:
            data["error"] = self.error
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass
class RunSummary:
    season: str
    stages: List[StageResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(stage.ok for stage in self.stages)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def stage(self, name: str) -> Optional[StageResult]:
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "season": self.season,
            "status": "ok" if self.ok else "failed",
            "stages": {stage.name: stage.to_dict() for stage in self.stages},
        }


def _skipped(name: str, reason: str) -> StageResult:
    logger.info({"stage_skipped": {"stage": name, "reason": reason}})
    return StageResult(name=name, status=StageStatus.SKIPPED, reason=reason)


def _failed(name: str, exc: BaseException, started: float) -> StageResult:
    if isinstance(exc, CodeDictError):
        logger.error({"stage_failed": {"stage": name, "error_type": type(exc).__name__, "error": str(exc)}})
    else:
        logger.exception({"stage_failed": {"stage": name, "error_type": type(exc).__name__, "error": str(exc)}})
    return StageResult(
        name=name,
        status=StageStatus.FAILED,
        error=f"{type(exc).__name__}: {exc}",
        duration_seconds=time.monotonic() - started,
    )


class RegistrySync:
    """Runs the merge and reconcile stages against one registry file.

    Clients may be injected (tests, fixtures); otherwise they are created from
    ``settings`` and closed when the run ends.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        fpl_client: Any = None,
        crossref_client: Any = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.settings = settings
        self._fpl_client = fpl_client
        self._crossref_client = crossref_client
        self._owned: List[Any] = []
        self.now = now
        self.season = current_season(now)

    async def run(self) -> RunSummary:
        summary = RunSummary(season=self.season)
        stages = self.settings.stages
        table: Optional[RegistryTable] = None
        try:
            if stages.merge:
                merge_result, table = await self.run_merge_stage()
                summary.stages.append(merge_result)
            else:
                summary.stages.append(_skipped(MERGE_STAGE, "disabled"))

            merge_failed = not summary.stages[-1].ok
            if not stages.reconcile:
                summary.stages.append(_skipped(RECONCILE_STAGE, "disabled"))
            elif merge_failed and not stages.reconcile_after_failed_merge:
                summary.stages.append(_skipped(RECONCILE_STAGE, "merge_failed"))
            else:
                summary.stages.append(await self.run_reconcile_stage(table))
        finally:
            await self.close()

        payload = {"run_summary": summary.to_dict()}
        if summary.ok:
            logger.info(payload)
        else:
            logger.error(payload)
        return summary

    async def run_merge_stage(self) -> Tuple[StageResult, Optional[RegistryTable]]:
        started = time.monotonic()
        path = self.settings.registry_path()
        cols = self.settings.registry.columns
        try:
            snapshot = await self._fpl().fetch_bootstrap()

            known = load_known_team_codes(self.settings.teams.known_codes_path)
            resolver = TeamCodeResolver(known)
            discovered = resolver.observe(snapshot.team_names())

            table = load_registry(path)
            columns_before = len(table.columns)
            season = season_columns(
                self.season,
                provider_id_prefix=cols.provider_id_prefix,
                team_prefix=cols.team_prefix,
            )
            added_columns = evolve_schema(table, season)
            if added_columns:
                emit_event({"event": "season_columns_added", "season": self.season, "columns": added_columns})

            result = merge_snapshot(table, snapshot.elements, resolver, season, columns=cols)
            save_registry(path, table)
        except Exception as exc:
            return _failed(MERGE_STAGE, exc, started), None

        if discovered and self.settings.teams.persist_discovered and self.settings.teams.known_codes_path:
            self._persist_team_codes(resolver, discovered)

        stage = StageResult(
            name=MERGE_STAGE,
            status=StageStatus.OK,
            counts={
                "snapshot_players": len(snapshot.elements),
                "updated": result.updated,
                "added": result.added,
                "columns_added": len(table.columns) - columns_before,
                "team_codes_discovered": len(discovered),
                "rows": len(table.rows),
            },
            warnings=list(result.warnings),
            wrote=True,
            duration_seconds=time.monotonic() - started,
        )
        logger.info(
            {
                "registry_updated": {
                    "path": str(path),
                    "updated": result.updated,
                    "added": result.added,
                }
            }
        )
        return stage, table

    async def run_reconcile_stage(self, table: Optional[RegistryTable] = None) -> StageResult:
        if self._crossref_client is None and not self.settings.crossref.url:
            return _skipped(RECONCILE_STAGE, "no_crossref_url")

        started = time.monotonic()
        path = self.settings.registry_path()
        try:
            mapping = await self._crossref().fetch_mapping()
            if table is None:
                table = load_registry(path)
            result = reconcile_external_ids(
                table,
                mapping.ids,
                external_names=mapping.names,
                columns=self.settings.registry.columns,
            )
            if result.changed:
                save_registry(path, table)
        except Exception as exc:
            return _failed(RECONCILE_STAGE, exc, started)

        return StageResult(
            name=RECONCILE_STAGE,
            status=StageStatus.OK,
            counts={
                "source_codes": len(mapping.ids),
                "assigned": result.assigned,
                "conflicts": result.conflicts,
                "names_filled": result.names_filled,
            },
            warnings=list(result.warnings),
            wrote=result.changed,
            duration_seconds=time.monotonic() - started,
        )

    def _persist_team_codes(self, resolver: TeamCodeResolver, discovered: List[int]) -> None:
        path = self.settings.teams.known_codes_path
        try:
            save_known_team_codes(path, resolver.merged())
        except StorageError as exc:
            # Non-fatal: the registry is already saved.
            logger.warning({"known_team_codes_save_failed": {"path": path, "error": str(exc)}})
            return
        logger.info({"known_team_codes_saved": {"path": path, "added": discovered}})

    async def close(self) -> None:
        while self._owned:
            client = self._owned.pop()
            await client.close()

    def _fpl(self) -> Any:
        if self._fpl_client is None:
            self._fpl_client = FPLClient(self.settings.fpl)
            self._owned.append(self._fpl_client)
        return self._fpl_client

    def _crossref(self) -> Any:
        if self._crossref_client is None:
            self._crossref_client = CrossRefClient(self.settings.crossref)
            self._owned.append(self._crossref_client)
        return self._crossref_client


__all__ = [
    "MERGE_STAGE",
    "RECONCILE_STAGE",
    "StageResult",
    "RunSummary",
    "RegistrySync",
]
