"""Command-line entry point for the style checker."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG_FILENAME, LintConfig, load_config
from .engine import lint_tree_files
from .errors import StyleCheckError
from .result import LintResult, format_summary_table
from .rules import RuleRegistry, default_registry
from .severity import Severity

EXIT_USAGE_ERROR = 3

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stylecheck",
        description="Style checks over parsed script syntax trees",
    )
    parser.add_argument(
        "trees",
        nargs="*",
        help="Serialized syntax tree documents (YAML or JSON) to check.",
    )
    parser.add_argument(
        "--source",
        "-s",
        dest="source_paths",
        action="append",
        default=[],
        help="Script the tree was parsed from (repeatable, paired with trees in order; one value applies to all).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"YAML configuration file (defaults to {DEFAULT_CONFIG_FILENAME} when present).",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (defaults to text).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the JSON report (e.g., artifacts/style.json).",
    )
    parser.add_argument(
        "--jobs",
        "-j",
        type=int,
        default=1,
        help="Number of trees to check in parallel.",
    )
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="Print the registered rules and exit.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_config(config_path: Optional[str]) -> LintConfig:
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise StyleCheckError(f"Config file not found: {config_path}")
        return load_config(path)
    return load_config(Path(DEFAULT_CONFIG_FILENAME))


def pair_sources(trees: Sequence[str], sources: Sequence[str]) -> List[Optional[str]]:
    if not sources:
        return [None] * len(trees)
    if len(sources) == 1:
        return [sources[0]] * len(trees)
    if len(sources) != len(trees):
        raise StyleCheckError(f"Got {len(sources)} --source values for {len(trees)} trees")
    return list(sources)


def run_lint(
    trees: Sequence[str],
    sources: Sequence[str] = (),
    config: Optional[LintConfig] = None,
    jobs: int = 1,
) -> List[LintResult]:
    config = config or LintConfig()
    registry = default_registry().configured(config)
    return lint_tree_files(trees, registry, pair_sources(trees, sources), jobs=jobs)


def format_rules(registry: RuleRegistry) -> str:
    lines = []
    for rule in registry:
        kinds = ", ".join(sorted(kind.value for kind in rule.kinds))
        lines.append(f"{rule.name:<22} {rule.severity.value:<12} {kinds}")
        if rule.description:
            lines.append(f"    {rule.description}")
    return "\n".join(lines)


def write_output(
    results: Sequence[LintResult],
    output_path: Optional[str],
    report_format: str,
    fail_on: Severity = Severity.WARNING,
) -> None:
    payload = json.dumps(
        {
            "results": [result.to_dict(fail_on) for result in results],
            "passed": all(result.passed(fail_on) for result in results),
        },
        indent=2,
    )
    if report_format == "json":
        print(payload)
    else:
        print(format_summary_table(results, fail_on))

    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(payload, encoding="utf-8")
        if report_format != "json":
            print(f"\nReport written to {output_path}")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = resolve_config(args.config)
        if args.list_rules:
            print(format_rules(default_registry().configured(config)))
            return 0
        if not args.trees:
            parser.error("at least one tree document is required")
        results = run_lint(args.trees, args.source_paths, config, jobs=args.jobs)
    except StyleCheckError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE_ERROR

    write_output(results, args.output_path, args.format, config.fail_on)
    return max(result.exit_code(config.fail_on) for result in results)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
