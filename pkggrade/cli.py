"""CLI entrypoint for pkggrade."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

from .config import ConfigError, load_config
from .logging import configure_logging
from .models import FinalReport
from .orchestrator import PackageAnalyzer

EXIT_PASS = 0
EXIT_ERROR = 1
EXIT_FAIL = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkggrade",
        description="Grade how well a repository declares and uses required packages.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a GitHub repository for required package usage.",
    )
    analyze_parser.add_argument("owner", help="Repository owner (user or organisation).")
    analyze_parser.add_argument("repo", help="Repository name.")
    analyze_parser.add_argument(
        "-p",
        "--package",
        dest="packages",
        action="append",
        required=True,
        help="Required package name; repeat for several packages.",
    )
    analyze_parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .pkggrade.yml or the directory containing it (defaults to cwd).",
    )
    output_group = analyze_parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--output",
        type=Path,
        help="Write the markdown report to this file.",
    )
    output_group.add_argument(
        "--save",
        action="store_true",
        help="Write the report to report-<owner>-<repo>-<grade>-<date>.md in the cwd.",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of a summary.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns 0 on pass, 2 on fail, 1 on error."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"pkggrade: {exc}", file=sys.stderr)
        return EXIT_ERROR

    analyzer = PackageAnalyzer.from_config(config)
    try:
        result = analyzer.analyze(args.owner, args.repo, args.packages)
    except Exception as exc:
        print(
            f"pkggrade analyze failed: {exc}\nRun with --verbose for more details.",
            file=sys.stderr,
        )
        return EXIT_ERROR

    report_path = None
    if args.output is not None:
        report_path = args.output
    elif args.save:
        report_path = Path(report_filename(args.owner, args.repo, result.grade))
    if report_path is not None:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(result.report, encoding="utf-8")

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(_summary(args.owner, args.repo, result))
        if report_path is not None:
            print(f"Report written to {_relativize(report_path)}")
    return EXIT_PASS if result.passed else EXIT_FAIL


def report_filename(owner: str, repo: str, grade: str, day: date | None = None) -> str:
    day = day or date.today()
    return f"report-{owner}-{repo}-{grade}-{day.isoformat()}.md"


def _summary(owner: str, repo: str, result: FinalReport) -> str:
    verdict = "PASS" if result.passed else "FAIL"
    return f"{owner}/{repo}: {verdict} score={result.score} grade={result.grade}"


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
