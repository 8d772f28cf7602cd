"""Curated FPL code -> Understat id mapping served as CSV.

The source is keyed on the same stable FPL player code as the registry and
is independent from the FPL API itself.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from codedict.config import CrossRefSettings
from codedict.errors import FetchError
from codedict.registry.codes import normalize_code

logger = logging.getLogger(__name__)


@dataclass
class CrossRefMapping:
    """External ids (and optional names) keyed by normalized stable code."""

    ids: Dict[str, str] = field(default_factory=dict)
    names: Dict[str, str] = field(default_factory=dict)
    rows_read: int = 0

    def __len__(self) -> int:
        return len(self.ids)


def parse_crossref_csv(
    text: str,
    *,
    code_column: str = "code",
    id_column: str = "understat",
    name_column: Optional[str] = None,
) -> CrossRefMapping:
    """Parse the mapping document.

    Rows without a code or an id are ignored. When a code repeats, the last
    non-empty id wins.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    header = [name.strip() for name in (reader.fieldnames or [])]
    reader.fieldnames = header
    missing = [col for col in (code_column, id_column) if col not in header]
    if missing:
        raise FetchError(f"cross-reference CSV lacks column(s) {missing}; header is {header}")
    use_names = bool(name_column) and name_column in header
    if name_column and not use_names:
        logger.warning({"crossref_name_column_missing": {"column": name_column}})

    mapping = CrossRefMapping()
    for row in reader:
        mapping.rows_read += 1
        code = normalize_code(row.get(code_column))
        external_id = normalize_code(row.get(id_column))
        if not code or not external_id:
            continue
        previous = mapping.ids.get(code)
        if previous and previous != external_id:
            logger.debug({"crossref_duplicate_code": {"code": code, "previous": previous, "value": external_id}})
        mapping.ids[code] = external_id
        if use_names:
            name = (row.get(name_column) or "").strip()
            if name:
                mapping.names[code] = name
    return mapping


class CrossRefClient:
    def __init__(
        self,
        settings: CrossRefSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not settings.url:
            raise ValueError("CrossRefSettings.url is required to fetch the cross-reference mapping.")
        self.settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.timeout_seconds, follow_redirects=True)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "CrossRefClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def fetch_mapping(self) -> CrossRefMapping:
        url = str(self.settings.url)
        logger.info({"crossref_request": {"url": url}})
        text = await self._get_text(url)
        try:
            mapping = parse_crossref_csv(
                text,
                code_column=self.settings.code_column,
                id_column=self.settings.id_column,
                name_column=self.settings.name_column,
            )
        except csv.Error as exc:
            raise FetchError(f"cross-reference CSV is malformed: {exc}", url=url) from exc
        except FetchError as exc:
            exc.url = url
            raise
        logger.info({"crossref_response": {"rows": mapping.rows_read, "mapped_codes": len(mapping)}})
        return mapping

    async def _get_text(self, url: str) -> str:
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            return resp.text
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(f"cross-reference source returned HTTP {status}", url=url, status_code=status) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"cross-reference request failed: {exc}", url=url) from exc


__all__ = [
    "CrossRefMapping",
    "CrossRefClient",
    "parse_crossref_csv",
]
