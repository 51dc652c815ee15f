"""Command line interface for running an auto-renew reconciliation."""
from __future__ import annotations

import argparse
import copy
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .clients import NetworkError, ParseError
from .config import ConfigurationError, credentials_from_env, load_configuration
from .factory import build_orchestrator
from .reporting import export_actions

LOGGER = logging.getLogger(__name__)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Enable auto-renew for registered domains that belong to active CRM deals",
    )
    parser.add_argument("--config", help="Optional tuning file (YAML or JSON)")
    parser.add_argument("--dotenv", default=None, help="Path to a .env file holding credentials")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and reconcile only; do not open the browser or call reactivation",
    )
    parser.add_argument(
        "--reactivate-expired",
        action="store_true",
        default=None,
        help="Reactivate expired domains through the registrar API",
    )
    parser.add_argument(
        "--include-last-deal-page",
        action="store_true",
        help="Also fetch the final page of the deal listing",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="List a domain once even when several deals reference it",
    )
    parser.add_argument("--report", type=Path, help="Write planned actions to a CSV or XLSX file")
    parser.add_argument("--headful", action="store_true", help="Show the browser window while toggling")
    parser.add_argument("--sandbox", action="store_true", help="Use the registrar sandbox endpoint")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def apply_overrides(config: Mapping[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Return a copy of ``config`` with command line switches folded in."""

    merged: Dict[str, Any] = copy.deepcopy(dict(config))
    if args.include_last_deal_page:
        merged.setdefault("deals", {})["page_range"] = "inclusive"
    if args.dedupe:
        merged.setdefault("reconcile", {})["duplicates"] = "dedupe"
    if args.sandbox:
        merged.setdefault("registrar", {})["sandbox"] = True
    if args.headful:
        merged.setdefault("browser", {})["headless"] = False
    return merged


def main(argv: list[str] | None = None, environ: Optional[Mapping[str, str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    if environ is None:
        load_dotenv(dotenv_path=args.dotenv, override=False)
        environ = os.environ

    try:
        config = load_configuration(args.config) if args.config else {}
        config = apply_overrides(config, args)
        credentials = credentials_from_env(environ, require_browser=not args.dry_run)
        orchestrator = build_orchestrator(
            config,
            credentials,
            dry_run=args.dry_run,
            reactivate_expired=args.reactivate_expired,
        )
    except ConfigurationError as exc:
        LOGGER.error("%s", exc)
        return 2

    try:
        summary = orchestrator.run()
    except (NetworkError, ParseError) as exc:
        LOGGER.error("Unable to size the directory listings: %s", exc)
        return 1

    if args.report:
        report_path = export_actions(summary.actions, args.report)
        LOGGER.info("Planned actions written to %s", report_path.resolve())

    for line in summary.lines():
        print(line)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
