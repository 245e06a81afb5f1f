from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from tagrecon.adapters.json_files import write_json
from tagrecon.app import build_catalog_client, compare_sources, fetch_catalog_to_file, load_sources
from tagrecon.config import (
    SourceFilesConfig,
    configure_logging,
    get_source_files_config,
    get_storage_config,
)
from tagrecon.domain.model import DiffCategory, FilterCriteria
from tagrecon.domain.query import export_rows, unit_options

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

DIFF_CHOICES = ("all", *(str(category) for category in DiffCategory))


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--primary",
        type=Path,
        help="Primary tag document (defaults to TAGRECON_PRIMARY_PATH)",
    )
    parser.add_argument(
        "--metadata",
        type=Path,
        help="Metadata tag list (defaults to TAGRECON_METADATA_PATH)",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        help="Previously fetched catalog file (defaults to TAGRECON_CATALOG_PATH)",
    )
    parser.add_argument(
        "--fetch-catalog",
        action="store_true",
        help="Fetch the catalog from the paged API instead of reading a file",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile sensor tag sources")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch = subparsers.add_parser("fetch-catalog", help="Download the full paged tag catalog")
    fetch.add_argument(
        "--output",
        type=Path,
        help="Destination JSON file (defaults to the data directory)",
    )
    fetch.add_argument(
        "--page-size",
        type=int,
        help="Items to request per page (defaults to config)",
    )
    fetch.add_argument(
        "--max-pages",
        type=int,
        help="Maximum number of pages to fetch before stopping",
    )

    compare = subparsers.add_parser("compare", help="Summarise differences between sources")
    _add_source_arguments(compare)
    compare.add_argument(
        "--snapshot",
        type=Path,
        help="Write the merged master mapping to this JSON file",
    )

    query = subparsers.add_parser("query", help="Filter merged tags and emit export rows")
    _add_source_arguments(query)
    query.add_argument("--search", type=str, default="", help="Case-insensitive search text")
    query.add_argument("--unit", type=str, help="Exact unit to match")
    query.add_argument(
        "--diff",
        type=str,
        choices=DIFF_CHOICES,
        default="all",
        help="Diff category to match (default: %(default)s)",
    )
    query.add_argument(
        "--output",
        type=Path,
        help="Write rows to this JSON file instead of printing JSON lines",
    )
    query.add_argument(
        "--list-units",
        action="store_true",
        help="Print the distinct units available for filtering and exit",
    )
    query.add_argument(
        "--require-complete",
        action="store_true",
        help="Fail instead of emitting provisional results when a source is missing",
    )

    args = parser.parse_args(list(argv))
    for name in ("page_size", "max_pages"):
        value = getattr(args, name, None)
        if value is not None and value <= 0:
            raise ValueError(f"--{name.replace('_', '-')} must be positive")
    return args


def _source_files(args: argparse.Namespace) -> SourceFilesConfig:
    defaults = get_source_files_config()
    return SourceFilesConfig(
        primary_path=args.primary or defaults.primary_path,
        metadata_path=args.metadata or defaults.metadata_path,
        catalog_path=None if args.fetch_catalog else args.catalog or defaults.catalog_path,
    )


def _run_fetch(args: argparse.Namespace) -> None:
    destination = args.output or get_storage_config().catalog_path()
    client = build_catalog_client(max_pages=args.max_pages)
    fetch_catalog_to_file(destination, client=client, page_size=args.page_size)


def _run_compare(args: argparse.Namespace) -> None:
    catalog_fetcher = build_catalog_client() if args.fetch_catalog else None
    compare_sources(
        _source_files(args),
        snapshot_path=args.snapshot,
        catalog_fetcher=catalog_fetcher,
    )


def _run_query(args: argparse.Namespace) -> None:
    catalog_fetcher = build_catalog_client() if args.fetch_catalog else None
    report = load_sources(_source_files(args), catalog_fetcher=catalog_fetcher)
    pipeline = report.pipeline
    if args.require_complete:
        if report.failures:
            failed = ", ".join(str(kind) for kind in report.failures)
            raise RuntimeError(f"Source loads failed: {failed}")
        pipeline.require_complete()

    if args.list_units:
        for unit in unit_options(pipeline.master):
            sys.stdout.write(f"{unit}\n")
        return

    criteria = FilterCriteria.from_strings(
        search_text=args.search,
        unit=args.unit,
        diff_category=args.diff,
    )
    matches = pipeline.query(criteria)
    rows = export_rows(matches)
    summary = pipeline.summary(matches)
    log.info(
        "Matched %s tags: both=%s only_primary=%s only_metadata=%s neither=%s",
        summary.total,
        summary.both,
        summary.only_primary,
        summary.only_metadata,
        summary.neither,
    )

    if args.output is not None:
        write_json(args.output, rows)
        log.info("Wrote %d rows to %s", len(rows), args.output)
        return
    for row in rows:
        sys.stdout.write(json.dumps(row, ensure_ascii=False, default=str) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        if parsed_args.command == "fetch-catalog":
            _run_fetch(parsed_args)
        elif parsed_args.command == "compare":
            _run_compare(parsed_args)
        elif parsed_args.command == "query":
            _run_query(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
