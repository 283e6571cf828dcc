# SPDX-License-Identifier: MIT
"""
█████╗ ██████╗  █████╗ ███████╗
██╔══██╗██╔══██╗██╔══██╗██╔════╝
███████║██████╔╝███████║███████╗
██╔══██║██╔══██╗██╔══██║╚════██║
██║  ██║██║  ██║██║  ██║███████║
╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
Copyright (C) 2026 Riza Emre ARAS <r.emrearas@proton.me>

Licensed under the MIT License.
See LICENSE and THIRD_PARTY_LICENSES for details.

Cellar SPARQL Console — command line

Validate SPARQL files, submit them to the Publications Office endpoint
(or any other), print results by content type, build share URLs, browse
the query library and run the development relay.

Usage:
    sparql-console validate query.rq
    sparql-console query a.rq b.rq --format text/csv
    sparql-console share query.rq
    sparql-console library list
    sparql-console --env dev relay
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from sparql_console import catalog as library
from sparql_console import relay
from sparql_console.config import ENVIRONMENTS, ConsoleConfig, load_config
from sparql_console.logger import SessionSummary, get_logger
from sparql_console.payload import NO_RESULTS, Escaped, Markup, PlainText, RenderedPayload, Tabular
from sparql_console.result import Success
from sparql_console.sparql.client import submit
from sparql_console.sparql.queries import ConfigurationError, SubmissionParameters, build_share_url
from sparql_console.validator import format_error, is_submittable, validate

log = get_logger("main")


# ── Rendering ──────────────────────────────────────────────────

def render_table(payload: Tabular) -> str:
    """Fixed-width text table for terminal output."""
    if payload.is_empty:
        return NO_RESULTS
    widths = {
        col: max([len(col)] + [len(row[col]) for row in payload.rows])
        for col in payload.columns
    }
    header = " | ".join(col.ljust(widths[col]) for col in payload.columns)
    rule = "-+-".join("-" * widths[col] for col in payload.columns)
    body = [
        " | ".join(row[col].ljust(widths[col]) for col in payload.columns)
        for row in payload.rows
    ]
    return "\n".join([header, rule, *body])


def render_payload(payload: RenderedPayload) -> str:
    if isinstance(payload, Tabular):
        return render_table(payload)
    if isinstance(payload, Markup):
        return payload.html
    if isinstance(payload, (Escaped, PlainText)):
        return payload.text
    raise TypeError(f"Unknown payload type: {type(payload).__name__}")


# ── Commands ───────────────────────────────────────────────────

def _read_query(path: Path) -> str | None:
    if not path.exists():
        log.error("Query file not found: %s", path)
        return None
    return path.read_text(encoding="utf-8")


def _params(args: argparse.Namespace, config: ConsoleConfig) -> SubmissionParameters:
    defaults = config.defaults
    return SubmissionParameters.from_form(
        result_format=args.format or defaults.result_format,
        default_graph_uri=args.default_graph_uri or defaults.default_graph_uri or "",
        timeout=args.timeout or defaults.timeout_millis,
        strict=args.strict or defaults.strict,
        debug=args.debug or defaults.debug,
        report=args.report or defaults.report,
    )


def cmd_validate(args: argparse.Namespace, config: ConsoleConfig) -> int:
    query = _read_query(args.file)
    if query is None:
        return 1
    result = validate(query)
    if not result.valid:
        print(format_error(query, result))
        return 1
    if not is_submittable(query, result):
        print("Query is empty")
        return 1
    print(f"{args.file}: OK")
    return 0


async def _run_queries(args: argparse.Namespace, config: ConsoleConfig) -> SessionSummary:
    params = _params(args, config)
    endpoint = config.submission_endpoint(args.env)
    summary = SessionSummary()

    for path in args.files:
        name = path.name
        query = _read_query(path)
        if query is None:
            summary.record(name, "missing", ok=False)
            continue

        check = validate(query)
        if not is_submittable(query, check):
            print(format_error(query, check) or f"{name}: query is empty")
            summary.record(name, "invalid", ok=False)
            continue

        # one submission in flight at a time
        outcome = await submit(query, params, endpoint, timeout=config.client_timeout)
        if isinstance(outcome, Success):
            print(render_payload(outcome.payload))
            rows = f", {len(outcome.payload.rows)} rows" if isinstance(outcome.payload, Tabular) else ""
            summary.record(name, "success", ok=True, detail=f"{outcome.payload.kind}{rows}")
        else:
            print(outcome.describe())
            summary.record(name, type(outcome).__name__, ok=False, detail=outcome.describe())

    return summary


def cmd_query(args: argparse.Namespace, config: ConsoleConfig) -> int:
    summary = asyncio.run(_run_queries(args, config))
    log.info(summary.report())
    return 0 if summary.failed == 0 else 1


def cmd_share(args: argparse.Namespace, config: ConsoleConfig) -> int:
    query = _read_query(args.file)
    if query is None:
        return 1
    minify = not args.no_minify
    if minify and not validate(query).valid:
        log.warning("Query does not parse; sharing it unminified")
        minify = False
    print(build_share_url(
        query,
        _params(args, config),
        config.endpoint,
        minify=minify,
        share_timeout_millis=config.share_timeout_millis,
    ))
    return 0


def cmd_library(args: argparse.Namespace, config: ConsoleConfig) -> int:
    loaded = library.load_catalog(config.catalog)
    if not loaded.ok:
        log.error(loaded.error)
        return 1

    if args.library_command == "list":
        for category, entries in loaded.data.categories().items():
            print(category)
            for entry in entries:
                print(f"  - {entry.title}")
        return 0

    entry = loaded.data.find(args.title)
    if entry is None:
        log.error("No query titled %r in the library", args.title)
        return 1
    text = library.fetch_query_text(config.catalog, entry)
    if not text.ok:
        log.error(text.error)
        return 1
    print(f"# {entry.title}")
    if entry.description:
        print(f"# {entry.description}")
    print(text.data)
    return 0


def cmd_relay(args: argparse.Namespace, config: ConsoleConfig) -> int:
    relay.run(config.relay)
    return 0


# ── Parser ─────────────────────────────────────────────────────

def _add_submission_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--format", default="", help="Result format (default: application/sparql-results+json)")
    parser.add_argument("--default-graph-uri", default="", help="Default graph URI")
    parser.add_argument("--timeout", default="", help="Server-side timeout in milliseconds")
    parser.add_argument("--strict", action="store_true", help="Strict checking of void variables")
    parser.add_argument("--debug", action="store_true", help="Log debug info at the end of output")
    parser.add_argument("--report", action="store_true", help="Generate SPARQL compilation report")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sparql-console",
        description="Validate and run SPARQL queries against a SPARQL endpoint",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to console.yaml")
    parser.add_argument("--env", choices=ENVIRONMENTS, default=None, help="dev routes through the relay")
    commands = parser.add_subparsers(dest="command", required=True)

    p_validate = commands.add_parser("validate", help="Check SPARQL syntax")
    p_validate.add_argument("file", type=Path)
    p_validate.set_defaults(handler=cmd_validate)

    p_query = commands.add_parser("query", help="Submit one or more query files")
    p_query.add_argument("files", type=Path, nargs="+")
    _add_submission_options(p_query)
    p_query.set_defaults(handler=cmd_query)

    p_share = commands.add_parser("share", help="Print a shareable GET URL")
    p_share.add_argument("file", type=Path)
    p_share.add_argument("--no-minify", action="store_true", help="Keep the query text as written")
    _add_submission_options(p_share)
    p_share.set_defaults(handler=cmd_share)

    p_library = commands.add_parser("library", help="Browse the query library")
    library_commands = p_library.add_subparsers(dest="library_command", required=True)
    library_commands.add_parser("list", help="List queries by category")
    p_show = library_commands.add_parser("show", help="Print one query")
    p_show.add_argument("title")
    p_library.set_defaults(handler=cmd_library)

    p_relay = commands.add_parser("relay", help="Run the development relay")
    p_relay.set_defaults(handler=cmd_relay)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    cfg_result = load_config(args.config.resolve() if args.config else None)
    if not cfg_result.ok:
        log.error(cfg_result.error)
        return 1

    try:
        return args.handler(args, cfg_result.data)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
