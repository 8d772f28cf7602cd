from __future__ import annotations

from enum import Enum


class WarningKind(str, Enum):
    UNRESOLVED_TEAM = "unresolved_team"
    MISSING_EXTERNAL_ID = "missing_external_id"
    EXTERNAL_ID_CONFLICT = "external_id_conflict"


class StageStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


__all__ = ["WarningKind", "StageStatus"]
