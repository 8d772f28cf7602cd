"""Serve the registry CSV read-only over HTTP."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from aiohttp import web
from dotenv import load_dotenv
from pydantic import ValidationError

from codedict.config import load_settings
from codedict.server.app import RegistryServer
from codedict.shared.logging import configure_logging

logger = logging.getLogger("codedict.entrypoints.serve")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the FPL code registry over HTTP")
    parser.add_argument("--config", type=str, default=None, help="YAML settings file")
    parser.add_argument("--registry", type=str, default=None, help="Registry CSV path (overrides settings)")
    parser.add_argument("--host", type=str, default=None)
    parser.add_argument("--port", type=int, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if os.environ.get("CODEDICT_TEST_MODE") != "true":
        load_dotenv()

    args = build_parser().parse_args(argv)
    overrides: dict = {}
    if args.registry:
        overrides["registry"] = {"path": args.registry}
    server: dict = {}
    if args.host is not None:
        server["host"] = args.host
    if args.port is not None:
        server["port"] = args.port
    if server:
        overrides["server"] = server
    try:
        settings = load_settings(args.config, **overrides)
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        print(f"codedict-serve: invalid configuration: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.logging.level, settings.logging.json_logs)
    registry_server = RegistryServer(settings)
    logger.info(
        {
            "serve": "starting",
            "host": settings.server.host,
            "port": settings.server.port,
            "route": registry_server.route,
            "registry": str(registry_server.path),
        }
    )
    web.run_app(registry_server.app, host=settings.server.host, port=settings.server.port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
