"""CSV-backed registry table.

The registry is small and hand-edited between runs, so it is read fully into
memory as string cells and written back wholesale. Saves go through a sibling
temp file and ``os.replace`` so readers never see a partial file.
"""

from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from codedict.errors import StorageError

logger = logging.getLogger(__name__)

Row = Dict[str, str]


@dataclass
class RegistryTable:
    """Ordered column schema plus rows that carry a value for every column."""

    columns: List[str]
    rows: List[Row] = field(default_factory=list)

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def add_column(self, name: str) -> bool:
        """Append ``name`` to the schema and back-fill it with ``""``.

        Returns False when the column already exists.
        """
        if name in self.columns:
            return False
        self.columns.append(name)
        for row in self.rows:
            row.setdefault(name, "")
        return True

    def new_row(self) -> Row:
        """Append and return a row with an empty value for every column."""
        row = {name: "" for name in self.columns}
        self.rows.append(row)
        return row

    def __len__(self) -> int:
        return len(self.rows)


def _normalize_record(header: List[str], record: List[str], line_no: int, path: Path) -> Optional[Row]:
    if not any(cell.strip() for cell in record):
        return None
    if len(record) > len(header):
        extra = record[len(header):]
        if any(cell.strip() for cell in extra):
            raise StorageError(
                f"{path}:{line_no}: row has {len(record)} cells but header has {len(header)}",
                path=str(path),
            )
        record = record[: len(header)]
    padded = list(record) + [""] * (len(header) - len(record))
    return dict(zip(header, padded))


def load_registry(path: str | os.PathLike[str]) -> RegistryTable:
    """Read the registry file.

    Raises:
        StorageError: the file is missing, unreadable, malformed, or holds no
            data rows. An empty registry is a misconfiguration, never a fresh
            start.
    """
    path = Path(path)
    if not path.is_file():
        raise StorageError(f"registry file not found: {path}", path=str(path))

    try:
        with path.open("r", encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if header is None or not any(name.strip() for name in header):
                raise StorageError(f"registry file is empty or missing header row: {path}", path=str(path))
            header = [name.strip() for name in header]
            duplicates = sorted({name for name in header if header.count(name) > 1})
            if duplicates:
                raise StorageError(f"registry header repeats columns {duplicates}: {path}", path=str(path))

            rows: List[Row] = []
            for record in reader:
                row = _normalize_record(header, record, reader.line_num, path)
                if row is not None:
                    rows.append(row)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise StorageError(f"cannot read registry {path}: {exc}", path=str(path)) from exc

    if not rows:
        raise StorageError(f"registry file has a header but no data rows: {path}", path=str(path))

    logger.debug({"registry_loaded": {"path": str(path), "rows": len(rows), "columns": len(header)}})
    return RegistryTable(columns=header, rows=rows)


def save_registry(path: str | os.PathLike[str], table: RegistryTable) -> None:
    """Rewrite the registry with ``table.columns`` as the column order."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(table.columns)
            for row in table.rows:
                writer.writerow([row.get(name, "") for name in table.columns])
        os.replace(tmp_path, path)
    except OSError as exc:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass
        raise StorageError(f"cannot write registry {path}: {exc}", path=str(path)) from exc

    logger.debug({"registry_saved": {"path": str(path), "rows": len(table.rows), "columns": len(table.columns)}})


__all__ = [
    "Row",
    "RegistryTable",
    "load_registry",
    "save_registry",
]
