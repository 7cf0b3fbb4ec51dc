"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="launchpad", description="Hackathon, internship and contest aggregator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings YAML (environment variables override it)",
    )
    # Also accepted after the subcommand; SUPPRESS keeps a top-level value.
    config_parent = argparse.ArgumentParser(add_help=False)
    config_parent.add_argument(
        "--config",
        type=Path,
        default=argparse.SUPPRESS,
        help="Settings YAML (environment variables override it)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # fetch
    fetch_parser = subparsers.add_parser("fetch", parents=[config_parent], help="Aggregate current opportunities")
    fetch_parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    fetch_parser.add_argument(
        "--sources",
        type=str,
        default=None,
        help="Comma-separated live sources (default: all configured)",
    )
    fetch_parser.add_argument(
        "--order",
        choices=["deadline", "deadline-desc", "title"],
        default="deadline",
        help="Result order (default: deadline, soonest first)",
    )
    fetch_parser.add_argument(
        "--type",
        choices=["hackathon", "internship", "contest"],
        default=None,
        help="Only this opportunity type",
    )
    fetch_parser.add_argument("--query", type=str, default=None, help="Keyword search")
    fetch_parser.add_argument("--output", type=Path, default=None, help="Write JSON to file (default: stdout)")
    fetch_parser.add_argument(
        "--report",
        action="store_true",
        help="Print per-source counts to stderr",
    )

    # store
    store_parser = subparsers.add_parser("store", parents=[config_parent], help="Manage curated opportunities")
    store_parser.add_argument(
        "action",
        choices=["list", "count", "import", "deactivate", "delete"],
        help="List, count, import from JSON, deactivate or delete",
    )
    store_parser.add_argument("--db", type=Path, default=None, help="Path to SQLite database")
    store_parser.add_argument("--all", action="store_true", help="Include inactive and past rows (list/count)")
    store_parser.add_argument("--input", type=Path, default=None, help="JSON file of opportunities (import)")
    store_parser.add_argument("--id", type=str, default=None, help="Opportunity id (deactivate/delete)")

    # sources
    subparsers.add_parser("sources", parents=[config_parent], help="List live sources in merge priority order")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "fetch":
        _run_fetch(args)
    elif args.command == "store":
        _run_store(args)
    elif args.command == "sources":
        _run_sources(args)
    else:
        parser.print_help()


def _load_settings(args: argparse.Namespace):
    from launchpad.config import Settings

    settings = Settings.from_yaml(args.config) if args.config else Settings()
    settings = Settings.from_env(settings)
    if getattr(args, "db", None) is not None:
        settings = settings.model_copy(update={"db_path": args.db})
    return settings


def _dump(opportunities: list) -> str:
    return json.dumps(
        [o.model_dump(mode="json", by_alias=True) for o in opportunities],
        indent=2,
        ensure_ascii=False,
    )


def _run_fetch(args: argparse.Namespace) -> None:
    """Run fetch command."""
    from launchpad.config import Settings
    from launchpad.connectors.registry import ConnectorRegistry
    from launchpad.filtering import SortOrder, filter_by_type, search
    from launchpad.models.opportunity import OpportunityType
    from launchpad.pipeline import run_pipeline

    settings = _load_settings(args)
    if args.sources:
        settings = Settings.model_validate({**settings.model_dump(), "sources": args.sources})
        for source_id in settings.sources:
            try:
                ConnectorRegistry.get_class(source_id)
            except ValueError as e:
                raise SystemExit(str(e))

    result = run_pipeline(settings, order=SortOrder(args.order))
    opportunities = filter_by_type(
        result.opportunities,
        OpportunityType(args.type) if args.type else None,
    )
    opportunities = search(opportunities, args.query)

    if args.report:
        for report in result.sources:
            status = "ok" if report.ok else f"failed ({report.error})"
            print(f"  {report.source_id}: {report.count} {status}", file=sys.stderr)
    if result.error:
        print(f"Error: {result.error}", file=sys.stderr)

    output = _dump(opportunities)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {len(opportunities)} opportunities to {args.output}")
    else:
        print(output)


def _run_store(args: argparse.Namespace) -> None:
    """Run store command."""
    from launchpad.models.opportunity import Opportunity
    from launchpad.store import OpportunityStore

    settings = _load_settings(args)
    store = OpportunityStore(settings.db_path)

    if args.action == "list":
        opps = store.get_all() if args.all else store.list_active()
        print(_dump(opps))
    elif args.action == "count":
        print(store.count() if args.all else len(store.list_active()))
    elif args.action == "import":
        if not args.input:
            raise SystemExit("store import requires --input")
        data = json.loads(args.input.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise SystemExit("--input must contain a JSON list of opportunities")
        added = 0
        for item in data:
            item = {"source": "Admin", **item}
            if store.upsert(Opportunity.model_validate(item)):
                added += 1
        print(f"Imported {len(data)} opportunities ({added} new)")
    elif args.action in ("deactivate", "delete"):
        if not args.id:
            raise SystemExit(f"store {args.action} requires --id")
        done = store.deactivate(args.id) if args.action == "deactivate" else store.delete(args.id)
        if not done:
            raise SystemExit(f"Opportunity not found: {args.id}")
        print(f"{args.action.capitalize()}d {args.id}")


def _run_sources(args: argparse.Namespace) -> None:
    """Print registered live sources."""
    from launchpad.connectors.registry import ConnectorRegistry

    for source_id in ConnectorRegistry.available_sources():
        connector_cls = ConnectorRegistry.get_class(source_id)
        print(f"{connector_cls.priority.value:>4}  {source_id:<12} {connector_cls.label}")


if __name__ == "__main__":
    main()
