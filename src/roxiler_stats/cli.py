"""Command-line interface for the stats service.

Provides subcommands: `serve`, `initialize`, `report` and `transactions`.
Each command is implemented as a `cmd_*` function that accepts an argparse
namespace and the loaded settings, and returns a process exit status.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any, Callable

from dotenv import load_dotenv
from pydantic import BaseModel

from roxiler_stats.aggregate.service import AggregationService
from roxiler_stats.config import Settings, get_settings
from roxiler_stats.errors import InvalidRequest, RoxilerStatsError
from roxiler_stats.ingest.load_seed import initialize_from_source
from roxiler_stats.logging_config import configure_logging
from roxiler_stats.store import build_store

log = logging.getLogger(__name__)

REPORT_KINDS = ("statistics", "bar-chart", "pie-chart", "combined")


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _to_jsonable(result: Any) -> Any:
    """Convert report models (or lists of them) into JSON-ready structures."""
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True)
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


def _print_json(result: Any) -> None:
    print(json.dumps(_to_jsonable(result), indent=2, ensure_ascii=False))


def _with_service(settings: Settings, action: Callable[[AggregationService], None]) -> None:
    """Run `action` against a service whose store is closed afterwards."""
    store = build_store(settings)
    try:
        action(AggregationService(store))
    finally:
        store.close()


# --------------------------------------------------
# SERVE
# --------------------------------------------------
def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    host = args.host or settings.host
    port = args.port or settings.port
    log.info("Starting API on %s:%d", host, port)
    uvicorn.run(
        "roxiler_stats.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


# --------------------------------------------------
# INITIALIZE
# --------------------------------------------------
def cmd_initialize(args: argparse.Namespace, settings: Settings) -> int:
    """Fetch the seed dump and replace the stored dataset."""
    if args.url:
        settings = replace(settings, seed_url=args.url)

    def _run(service: AggregationService) -> None:
        inserted = initialize_from_source(service.store, settings)
        print(f"Database initialized with {inserted} transactions")

    _with_service(settings, _run)
    return 0


# --------------------------------------------------
# REPORTS
# --------------------------------------------------
def cmd_report(args: argparse.Namespace, settings: Settings) -> int:
    """Print one monthly report as JSON."""

    def _run(service: AggregationService) -> None:
        builders = {
            "statistics": service.compute_statistics,
            "bar-chart": service.compute_histogram,
            "pie-chart": service.compute_distribution,
            "combined": service.compute_combined,
        }
        _print_json(builders[args.kind](args.month))

    _with_service(settings, _run)
    return 0


def cmd_transactions(args: argparse.Namespace, settings: Settings) -> int:
    """Print one page of the transaction listing as JSON."""

    def _run(service: AggregationService) -> None:
        _print_json(service.list_transactions(args.search, args.page, args.per_page))

    _with_service(settings, _run)
    return 0


# --------------------------------------------------
# CLI
# --------------------------------------------------
COMMANDS: dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    "serve": cmd_serve,
    "initialize": cmd_initialize,
    "report": cmd_report,
    "transactions": cmd_transactions,
}


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="roxiler-stats")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.add_argument("--reload", action="store_true")

    p_init = sub.add_parser("initialize", help="replace the dataset from the seed dump")
    p_init.add_argument("--url", default=None, help="override SEED_URL")

    p_report = sub.add_parser("report", help="print a monthly report")
    p_report.add_argument("--month", required=True)
    p_report.add_argument("--kind", choices=REPORT_KINDS, default="combined")

    p_tx = sub.add_parser("transactions", help="print a page of transactions")
    p_tx.add_argument("--search", default=None)
    p_tx.add_argument("--page", type=int, default=1)
    p_tx.add_argument("--per-page", type=int, default=10)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_path, settings.log_level)

    try:
        return COMMANDS[args.cmd](args, settings)
    except InvalidRequest as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except RoxilerStatsError as exc:
        log.error("%s failed: %s", args.cmd, exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
