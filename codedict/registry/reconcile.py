"""Reconcile the curated external id source against the registry.

The external source is authoritative: a different non-empty value replaces a
stored id and is reported as a conflict. An empty source value never clears
a stored id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from codedict.config import RegistryColumns
from codedict.errors import DataQualityWarning
from codedict.registry.codes import normalize_code
from codedict.registry.store import RegistryTable
from codedict.shared.enums import WarningKind
from codedict.shared.logging import emit_event

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    assigned: int = 0
    conflicts: int = 0
    names_filled: int = 0
    unchanged: int = 0
    warnings: List[DataQualityWarning] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return (self.assigned + self.conflicts + self.names_filled) > 0


def reconcile_external_ids(
    table: RegistryTable,
    external_ids: Mapping[str, str],
    *,
    external_names: Optional[Mapping[str, str]] = None,
    columns: Optional[RegistryColumns] = None,
) -> ReconcileResult:
    """Apply ``external_ids`` (normalized code -> id) to every coded row."""
    columns = columns or RegistryColumns()
    external_names = external_names or {}
    table.add_column(columns.external_id)
    table.add_column(columns.external_name)

    result = ReconcileResult()
    for row in table.rows:
        code = normalize_code(row.get(columns.code))
        if not code:
            continue

        stored = row.get(columns.external_id, "").strip()
        incoming = normalize_code(external_ids.get(code))

        if incoming and stored and normalize_code(stored) != incoming:
            warning = DataQualityWarning(
                kind=WarningKind.EXTERNAL_ID_CONFLICT,
                message=(
                    f"{columns.external_id} conflict for code {code} "
                    f"({row.get(columns.display_name, '')}): stored {stored}, source {incoming}; using source."
                ),
                context={"code": code, "stored": stored, "source": incoming},
            )
            result.warnings.append(warning)
            logger.warning(warning.to_dict())
            emit_event({"event": "external_id_conflict", "code": code, "stored": stored, "source": incoming})
            row[columns.external_id] = incoming
            result.conflicts += 1
            # The stored name belonged to the replaced id.
            source_name = (external_names.get(code) or "").strip()
            if source_name:
                row[columns.external_name] = source_name
            continue

        if incoming and not stored:
            row[columns.external_id] = incoming
            result.assigned += 1
        else:
            result.unchanged += 1

        source_name = (external_names.get(code) or "").strip()
        if source_name and not row.get(columns.external_name, "").strip():
            row[columns.external_name] = source_name
            result.names_filled += 1

    logger.info(
        {
            "reconcile_complete": {
                "assigned": result.assigned,
                "conflicts": result.conflicts,
                "names_filled": result.names_filled,
                "changed": result.changed,
            }
        }
    )
    return result


__all__ = ["ReconcileResult", "reconcile_external_ids"]
