from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from codedict.config import FPLSettings
from codedict.errors import FetchError

from .types import BootstrapSnapshot, PlayerElement, TeamEntry

logger = logging.getLogger(__name__)


class FPLClient:
    """
    Async HTTP client for the Fantasy Premier League bootstrap endpoint.

    - One GET per run, no retries: a failure aborts the calling stage
    - Maps transport, status and decode failures to ``FetchError``
    - Skips individual malformed players/teams instead of failing the payload
    """

    def __init__(
        self,
        settings: Optional[FPLSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or FPLSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.timeout_seconds,
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "FPLClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public fetch helpers
    # ------------------------------------------------------------------
    async def fetch_bootstrap(self) -> BootstrapSnapshot:
        url = self.settings.bootstrap_url
        logger.info({"fpl_bootstrap_request": {"url": url}})
        payload = await self._get_json(url)
        snapshot = self._parse_bootstrap(payload, url)
        logger.info(
            {
                "fpl_bootstrap_response": {
                    "elements": len(snapshot.elements),
                    "teams": len(snapshot.teams),
                }
            }
        )
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _get_json(self, url: str) -> Any:
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(f"FPL bootstrap returned HTTP {status}", url=url, status_code=status) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"FPL bootstrap request failed: {exc}", url=url) from exc
        except ValueError as exc:
            raise FetchError(f"FPL bootstrap response is not JSON: {exc}", url=url) from exc

    def _parse_bootstrap(self, payload: Any, url: str) -> BootstrapSnapshot:
        if not isinstance(payload, dict):
            raise FetchError("FPL bootstrap payload is not a JSON object", url=url)
        raw_elements = payload.get("elements")
        raw_teams = payload.get("teams")
        if not isinstance(raw_elements, list) or not isinstance(raw_teams, list):
            raise FetchError("FPL bootstrap payload lacks 'elements' or 'teams'", url=url)
        return BootstrapSnapshot(
            elements=self._parse_elements(raw_elements),
            teams=self._parse_teams(raw_teams),
        )

    def _parse_elements(self, payload: List[Any]) -> List[PlayerElement]:
        elements: List[PlayerElement] = []
        for item in payload:
            try:
                elements.append(PlayerElement.model_validate(item))
            except ValidationError as exc:
                logger.debug({"fpl_parse_element_error": {"item_code": _peek(item, "code"), "error": str(exc)}})
        return elements

    def _parse_teams(self, payload: List[Any]) -> List[TeamEntry]:
        teams: List[TeamEntry] = []
        for item in payload:
            try:
                teams.append(TeamEntry.model_validate(item))
            except ValidationError as exc:
                logger.debug({"fpl_parse_team_error": {"item_code": _peek(item, "code"), "error": str(exc)}})
        return teams


def _peek(item: Any, key: str) -> Any:
    return item.get(key) if isinstance(item, dict) else None


__all__ = ["FPLClient"]
