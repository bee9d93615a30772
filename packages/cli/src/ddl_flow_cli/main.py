import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ddl_flow_core import (
    DIRECTIONS,
    EXAMPLE_SQL,
    LayoutConfig,
    ShareDecodeError,
    filter_graph,
    flow_to_dict,
    format_stats,
    graph_issues,
    graph_stats,
    layout_graph,
    load_from_url,
    load_layout_config,
    load_yaml_document,
    parse_postgres_schema,
    read_ddl,
    share_url,
)
from ddl_flow_core.issues import Issue, has_errors, to_lines

logger = logging.getLogger("ddl_flow_cli")


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return read_ddl(path)


def _dump(payload: Dict[str, Any], fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _emit(text: str, out: str) -> None:
    if out:
        Path(out).write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
        print(f"Wrote {out}")
    else:
        print(text)


def _print_issues(issues: List[Issue]) -> None:
    if not issues:
        print("No issues found.")
        return
    for line in to_lines(issues):
        print(line)


def cmd_parse(args: argparse.Namespace) -> int:
    graph = parse_postgres_schema(_read_input(args.input))
    if args.search:
        graph = filter_graph(graph, args.search)
    _emit(_dump(graph.to_dict(), args.format), args.out)
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    config = load_layout_config(args.config) if args.config else LayoutConfig()
    direction = args.direction or config.direction
    graph = parse_postgres_schema(_read_input(args.input))
    if args.search:
        graph = filter_graph(graph, args.search)
    nodes, edges = layout_graph(graph, direction=direction, config=config)
    _emit(_dump(flow_to_dict(nodes, edges), args.format), args.out)
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    stats = graph_stats(parse_postgres_schema(_read_input(args.input)))
    if args.output_json:
        print(json.dumps(stats, indent=2))
    else:
        print(format_stats(stats))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    issues = graph_issues(load_yaml_document(args.document))
    _print_issues(issues)
    return 1 if has_errors(issues) else 0


def cmd_share(args: argparse.Namespace) -> int:
    print(share_url(_read_input(args.input), args.base_url))
    return 0


def cmd_unshare(args: argparse.Namespace) -> int:
    try:
        sql = load_from_url(args.url)
    except ShareDecodeError as exc:
        print(f"[ERROR] Could not decode shared schema: {exc}", file=sys.stderr)
        return 1
    if sql is None:
        print("No schema provided in URL.", file=sys.stderr)
        return 2
    _emit(sql, args.out)
    return 0


def cmd_example(args: argparse.Namespace) -> int:
    _emit(EXAMPLE_SQL, args.out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ddl-flow", description="Visualize Postgres DDL as a table graph")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    parse_parser = sub.add_parser("parse", help="Extract tables and foreign keys from DDL")
    parse_parser.add_argument("input", help="DDL file path, or - for stdin")
    parse_parser.add_argument("--format", choices=["json", "yaml"], default="json", help="Output format")
    parse_parser.add_argument("--search", help="Keep only tables/columns matching this text")
    parse_parser.add_argument("--out", default="", help="Write output to file")
    parse_parser.set_defaults(func=cmd_parse)

    layout_parser = sub.add_parser("layout", help="Compute positioned nodes and edges")
    layout_parser.add_argument("input", help="DDL file path, or - for stdin")
    layout_parser.add_argument("--direction", choices=list(DIRECTIONS), help="Layout direction (default from config, LR)")
    layout_parser.add_argument("--config", help="Layout config YAML")
    layout_parser.add_argument("--format", choices=["json", "yaml"], default="json", help="Output format")
    layout_parser.add_argument("--search", help="Keep only tables/columns matching this text")
    layout_parser.add_argument("--out", default="", help="Write output to file")
    layout_parser.set_defaults(func=cmd_layout)

    stats_parser = sub.add_parser("stats", help="Show schema statistics")
    stats_parser.add_argument("input", help="DDL file path, or - for stdin")
    stats_parser.add_argument("--output-json", action="store_true", help="Print stats as JSON")
    stats_parser.set_defaults(func=cmd_stats)

    validate_parser = sub.add_parser("validate", help="Validate a schema graph JSON/YAML document")
    validate_parser.add_argument("document", help="Graph document path")
    validate_parser.set_defaults(func=cmd_validate)

    share_parser = sub.add_parser("share", help="Build a share URL carrying the DDL")
    share_parser.add_argument("input", help="DDL file path, or - for stdin")
    share_parser.add_argument("--base-url", default="http://localhost:5173/", help="Viewer URL")
    share_parser.set_defaults(func=cmd_share)

    unshare_parser = sub.add_parser("unshare", help="Extract the DDL from a share URL")
    unshare_parser.add_argument("url", help="Share URL")
    unshare_parser.add_argument("--out", default="", help="Write DDL to file")
    unshare_parser.set_defaults(func=cmd_unshare)

    example_parser = sub.add_parser("example", help="Print the example DDL")
    example_parser.add_argument("--out", default="", help="Write DDL to file")
    example_parser.set_defaults(func=cmd_example)

    return parser


def main(argv: List[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Running %s", args.command)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
