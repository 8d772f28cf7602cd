"""Read-only HTTP view of the registry file.

The file is read fresh on every request and served verbatim. Sync runs
replace the file atomically, so no coordination with writers is needed.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from codedict.config import Settings

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "FPL code dictionary. The registry is served at {route}\n"


class RegistryServer:
    """aiohttp application serving one registry CSV."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.path: Path = settings.registry_path()
        self.route: str = settings.serve_route()
        self.app = web.Application()
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/", self._handle_root)
        self.app.router.add_get("/health", self._handle_health)
        self.app.router.add_get(self.route, self._handle_registry)

    async def _handle_root(self, request: web.Request) -> web.Response:
        return web.Response(text=WELCOME_MESSAGE.format(route=self.route), content_type="text/plain")

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok", "registry_exists": self.path.is_file()})

    async def _handle_registry(self, request: web.Request) -> web.Response:
        try:
            body = await asyncio.to_thread(self.path.read_bytes)
        except OSError as exc:
            logger.error({"registry_read_failed": {"path": str(self.path), "error": str(exc)}})
            return web.Response(status=500, text="Error reading CSV file", content_type="text/plain")

        return web.Response(
            body=body,
            content_type="text/csv",
            charset="utf-8",
            headers={"Cache-Control": f"public, max-age={self.settings.server.cache_max_age_seconds}"},
        )


def create_app(settings: Optional[Settings] = None) -> web.Application:
    return RegistryServer(settings or Settings()).app


__all__ = ["WELCOME_MESSAGE", "RegistryServer", "create_app"]
