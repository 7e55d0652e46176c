"""
Charter command line

    charter validate CONSTITUTION.md [more.md ...] [--prior-dir DIR] [--format json]
    charter history v1.md v2.md v3.md
    charter header CONSTITUTION.md [--render]

Exit codes:
    0  every document passed
    1  at least one error finding (or warning, with --strict)
    2  a document could not be loaded
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Optional, Sequence

from charter import __version__
from charter.config import DEFAULTS
from charter.errors import CharterError, NotFound, ReadError
from charter.front_matter import parse_front_matter, render_front_matter
from charter.loader import load_document
from charter.logging_utils import configure_logging
from charter.pipeline import DocumentValidator
from charter.report import EXIT_FINDINGS, EXIT_LOAD_ERROR, EXIT_OK, ValidationReport


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="charter",
        description="Validate constitution-style governance documents.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level", default=None,
        help="Logging level for diagnostics on stderr (default: CHARTER_LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Validate one or more documents")
    validate.add_argument("paths", nargs="+", metavar="PATH")
    validate.add_argument(
        "--prior-dir", default=None,
        help="Directory holding prior snapshots, matched by file name",
    )
    validate.add_argument("--jobs", type=int, default=None, help="Worker threads")
    validate.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    validate.add_argument(
        "--no-placeholders", action="store_true",
        help="Skip the unresolved [PLACEHOLDER] scan",
    )
    validate.add_argument("--format", choices=("text", "json"), default="text")

    history = sub.add_parser("history", help="Check version monotonicity across snapshots")
    history.add_argument("paths", nargs="+", metavar="SNAPSHOT")
    history.add_argument("--strict", action="store_true", help="Treat warnings as failures")
    history.add_argument("--format", choices=("text", "json"), default="text")

    header = sub.add_parser("header", help="Show the parsed Sync Impact Report header")
    header.add_argument("path", metavar="PATH")
    header.add_argument("--render", action="store_true", help="Print the canonical header block")

    return parser


def _emit(report: ValidationReport, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.summary())


def _cmd_validate(args: argparse.Namespace) -> int:
    config = DEFAULTS
    if args.jobs is not None:
        config = replace(config, jobs=max(1, args.jobs))
    if args.no_placeholders:
        config = replace(config, check_placeholders=False)

    report = DocumentValidator(config).validate_paths(args.paths, args.prior_dir)
    _emit(report, args.format)
    return report.exit_code(strict=args.strict)


def _cmd_history(args: argparse.Namespace) -> int:
    report = DocumentValidator().validate_history(args.paths)
    _emit(report, args.format)
    return report.exit_code(strict=args.strict)


def _cmd_header(args: argparse.Namespace) -> int:
    try:
        text = load_document(args.path)
    except (NotFound, ReadError) as exc:
        print(f"[charter] ERROR: {exc.message}", file=sys.stderr)
        return EXIT_LOAD_ERROR

    try:
        front_matter = parse_front_matter(text)
    except CharterError as exc:
        print(f"[charter] {exc.code}: {exc.message}", file=sys.stderr)
        return EXIT_FINDINGS

    if args.render:
        if front_matter.is_empty:
            print("[charter] No Sync Impact Report header found.", file=sys.stderr)
            return EXIT_FINDINGS
        sys.stdout.write(render_front_matter(front_matter))
    else:
        print(json.dumps(front_matter.to_dict(), indent=2))
    return EXIT_OK


COMMANDS = {
    "validate": _cmd_validate,
    "history": _cmd_history,
    "header": _cmd_header,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level, force=True)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
