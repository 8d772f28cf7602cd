"""Registry sync entrypoint.

Fetches the FPL bootstrap and the cross-reference mapping, updates the
registry CSV, and exits non-zero if any enabled stage failed.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from codedict.config import Settings, load_settings
from codedict.shared.logging import configure_logging, setup_events_logger
from codedict.sync.runner import RegistrySync

logger = logging.getLogger("codedict.entrypoints.sync")

EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Update the FPL code / Understat id registry")
    parser.add_argument("--config", type=str, default=None, help="YAML settings file")
    parser.add_argument("--registry", type=str, default=None, help="Registry CSV path (overrides settings)")
    parser.add_argument("--crossref-url", type=str, default=None, help="Cross-reference CSV URL (overrides settings)")
    parser.add_argument("--skip-merge", action="store_true", help="Do not run the FPL merge stage")
    parser.add_argument("--skip-reconcile", action="store_true", help="Do not run the cross-reference stage")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default from settings)")
    parser.add_argument("--summary-json", action="store_true", help="Print the run summary as JSON on stdout")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict = {}
    if args.registry:
        overrides["registry"] = {"path": args.registry}
    if args.crossref_url:
        overrides["crossref"] = {"url": args.crossref_url}
    stages: dict = {}
    if args.skip_merge:
        stages["merge"] = False
    if args.skip_reconcile:
        stages["reconcile"] = False
    if stages:
        overrides["stages"] = stages
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    return load_settings(args.config, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    if os.environ.get("CODEDICT_TEST_MODE") != "true":
        load_dotenv()

    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        print(f"codedict-sync: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(settings.logging.level, settings.logging.json_logs)
    setup_events_logger(settings.logging.log_dir, settings.logging.events_retention_size)
    logger.info({"sync": "starting", "registry": str(settings.registry_path())})

    try:
        summary = asyncio.run(RegistrySync(settings).run())
    except KeyboardInterrupt:
        logger.warning({"sync": "interrupted"})
        return 130

    if args.summary_json:
        print(json.dumps(summary.to_dict(), indent=2))
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
