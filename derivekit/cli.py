"""CLI entrypoints for derivekit commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .config import ConfigError
from .errors import ParseError
from .logging import configure_logging
from .orchestrator import ExpansionResult, build_orchestrator


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    """Register logging flags; subcommands suppress defaults so global flags survive."""
    flag_default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=flag_default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=flag_default,
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a DEBUG-level log to this file.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .derivekit.yml file (defaults to the one next to PATH).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="derivekit",
        description="Expand derive generators and check #[sorted] ordering in Rust sources.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    expand_parser = subparsers.add_parser(
        "expand",
        help="Expand derives and strip consumed markers.",
    )
    _add_logging_options(expand_parser, suppress_default=True)
    _add_config_option(expand_parser)
    expand_parser.add_argument(
        "path",
        help="A .rs file or a directory of .rs files.",
    )
    expand_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write to this file or directory instead of in place ('-' for stdout).",
    )
    expand_parser.add_argument(
        "--diff",
        action="store_true",
        help="Print a unified diff of the expansion without writing files.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Report diagnostics without writing any files.",
    )
    _add_logging_options(check_parser, suppress_default=True)
    _add_config_option(check_parser)
    check_parser.add_argument(
        "path",
        help="A .rs file or a directory of .rs files.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for derivekit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    try:
        orchestrator = build_orchestrator(args.path, args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    to_stdout = args.command == "expand" and args.output == "-"
    preview = args.command == "check" or to_stdout or bool(getattr(args, "diff", False))
    try:
        results = orchestrator.run_expand(
            args.path,
            None if preview else args.output,
            check=preview,
        )
    except (FileNotFoundError, ParseError) as exc:
        parser.exit(1, f"derivekit {args.command} failed: {exc}\n")
    except OSError as exc:
        parser.exit(1, f"derivekit {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    _print_diagnostics(results)
    if args.command == "expand":
        if to_stdout:
            for result in results:
                sys.stdout.write(result.source)
        elif getattr(args, "diff", False):
            for result in results:
                sys.stdout.write(result.diff)
        else:
            changed = sum(1 for result in results if result.changed)
            print(f"Expanded {len(results)} file(s), {changed} changed")

    if any(result.diagnostics for result in results):
        sys.exit(1)


def _print_diagnostics(results: List[ExpansionResult]) -> None:
    for result in results:
        for diagnostic in result.diagnostics:
            print(diagnostic.render(), file=sys.stderr)


if __name__ == "__main__":
    main(sys.argv[1:])
