"""Command-line interface for the citation database.

Subcommands:
    lookup <id>            Show an entry as JSON
    search <term>          Search titles, authors and abstracts
    tags <tag>             List entries carrying a tag
    bibtex <id>...         Emit BibTeX for one or more entries
    validate               Check schema conformance, unique ids and ordering
    add-arxiv <id>         Add a paper from arXiv
    add-clawxiv <id>       Add a paper from clawXiv
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from citedb.bibtex import to_bibtex
from citedb.config import CitedbConfig, resolve_config
from citedb.errors import CitedbError
from citedb.ingest import IngestionPipeline
from citedb.query import QueryEngine, summary_line
from citedb.sources import ArxivSource, ClawxivSource
from citedb.store import Store
from citedb.utils import HttpClient
from citedb.validator import CHECK_DUPLICATES, CHECK_FORMAT, CHECK_ORDER, CHECK_SCHEMA, ValidationReport, Validator

LOG = logging.getLogger("citedb")


def build_arg_parser() -> argparse.ArgumentParser:
    # Global options are accepted before or after the subcommand.
    common = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
    common.add_argument("--db", dest="database", help="Database file (default: citations.json)")
    common.add_argument("--schema", help="JSON Schema document (default: bundled schema)")
    common.add_argument("--config", help="YAML configuration file")
    common.add_argument("--timeout", type=float, help="HTTP timeout seconds for add-* commands")
    common.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    p = argparse.ArgumentParser(
        prog="citedb",
        description="Look up, export, validate and extend a verified citation database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common],
        epilog="""
Examples:
  %(prog)s lookup vaswani2017attention
  %(prog)s search "multi-agent"
  %(prog)s bibtex vaswani2017attention du2023improving
  %(prog)s validate
  %(prog)s add-arxiv 2301.07041v2
  %(prog)s add-clawxiv clawxiv.2602.00011
""",
    )
    sub = p.add_subparsers(dest="command", metavar="command")

    s = sub.add_parser("lookup", parents=[common], help="Show entry by ID")
    s.add_argument("id")

    s = sub.add_parser("search", parents=[common], help="Search titles/authors/abstracts (case-insensitive pattern)")
    s.add_argument("term")

    s = sub.add_parser("tags", parents=[common], help="Filter by tag")
    s.add_argument("tag")

    s = sub.add_parser("bibtex", parents=[common], help="Generate BibTeX")
    s.add_argument("ids", nargs="+", metavar="id")

    sub.add_parser("validate", parents=[common], help="Validate database")

    for name, label in (("add-arxiv", "arXiv"), ("add-clawxiv", "clawXiv")):
        s = sub.add_parser(name, parents=[common], help=f"Add a paper from {label}")
        s.add_argument("identifier", help=f"{label} identifier")
        s.add_argument("--dry-run", action="store_true", help="Show the entry without writing the database")

    return p


def init_logging(verbose: bool) -> logging.Logger:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    return LOG


# ------------- Commands -------------


def cmd_lookup(store: Store, args: argparse.Namespace) -> int:
    entry = QueryEngine(store).lookup(args.id)
    print(json.dumps(entry, indent=2, ensure_ascii=False))
    return 0


def _print_matches(matches: list[dict[str, Any]], empty_message: str) -> int:
    if not matches:
        print(empty_message)
        return 0
    for e in matches:
        print(summary_line(e))
    return 0


def cmd_search(store: Store, args: argparse.Namespace) -> int:
    return _print_matches(QueryEngine(store).search(args.term), "No matches found")


def cmd_tags(store: Store, args: argparse.Namespace) -> int:
    return _print_matches(QueryEngine(store).filter_by_tag(args.tag), f"No entries with tag '{args.tag}'")


def cmd_bibtex(store: Store, args: argparse.Namespace) -> int:
    found = []
    missing = []
    for record_id in args.ids:
        entry = store.find_by_id(record_id)
        if entry is None:
            LOG.warning("Entry '%s' not found, skipping", record_id)
            missing.append(record_id)
        else:
            found.append(entry)
    if found:
        print(to_bibtex(found), end="")
    return 1 if missing else 0


_CHECK_LABELS = {
    CHECK_FORMAT: "database is a valid JSON array of objects",
    CHECK_SCHEMA: "entries conform to schema",
    CHECK_DUPLICATES: "no duplicate IDs",
    CHECK_ORDER: "IDs are in alphabetical order",
}


def print_report(report: ValidationReport) -> None:
    for check in report.checks:
        label = _CHECK_LABELS.get(check.name, check.name)
        if check.skipped:
            print(f"- {label} (skipped)")
            continue
        if check.passed:
            print(f"✓ {label}")
            continue
        print(f"✗ {label}", file=sys.stderr)
        for i, msg in enumerate(check.messages, 1):
            prefix = f"  [{i}] " if check.name == CHECK_SCHEMA else "  "
            print(f"{prefix}{msg}", file=sys.stderr)
    print(f"{report.entry_count} entries in database")
    if report.ok:
        print("All validations passed!")


def cmd_validate(config: CitedbConfig, args: argparse.Namespace) -> int:
    validator = Validator.from_path(config.schema_path())
    report = validator.validate_path(config.database)
    print_report(report)
    return 0 if report.ok else 1


def cmd_add(config: CitedbConfig, args: argparse.Namespace) -> int:
    store = Store.load(config.database)
    http = HttpClient(timeout=config.timeout, user_agent=config.user_agent)
    try:
        if args.command == "add-arxiv":
            source = ArxivSource(http, config.arxiv_api)
        else:
            source = ClawxivSource(http, config.clawxiv_api)
        result = IngestionPipeline(store, source, dry_run=args.dry_run).run(args.identifier)
    finally:
        http.close()

    if not result.persisted:
        print(json.dumps(result.record.to_dict(), indent=2, ensure_ascii=False))
        return 0
    print(f"Added entry: {result.record.id}")
    print("  Run 'citedb validate' to verify, then commit the database:")
    print(f"    git add {config.database}")
    print(f'    git commit -m "Add {result.record.id}"')
    return 0


QUERY_COMMANDS = {
    "lookup": cmd_lookup,
    "search": cmd_search,
    "tags": cmd_tags,
    "bibtex": cmd_bibtex,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code: 0 on success, 1 on any reported error.
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    try:
        overrides = {k: getattr(args, k, None) for k in ("database", "schema", "timeout", "verbose")}
        config = resolve_config(getattr(args, "config", None), overrides)
    except (OSError, ValueError) as e:
        print(f"Error: could not load configuration: {e}", file=sys.stderr)
        return 1
    init_logging(config.verbose)

    try:
        if args.command == "validate":
            return cmd_validate(config, args)
        if args.command in ("add-arxiv", "add-clawxiv"):
            return cmd_add(config, args)
        store = Store.load(config.database)
        return QUERY_COMMANDS[args.command](store, args)
    except CitedbError as e:
        LOG.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
