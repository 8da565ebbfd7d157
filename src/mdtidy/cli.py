"""Command-line interface for mdtidy."""

from __future__ import annotations

import argparse
import asyncio
import difflib
import sys
from pathlib import Path
from typing import Sequence

from mdtidy import __version__
from mdtidy.config_file import dump_config, resolve_config, save_config
from mdtidy.exceptions import ConfigError, ProcessingError
from mdtidy.processor import ProcessingResult, find_files, process_files
from mdtidy.schemas import FormatterConfig
from mdtidy.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CHANGES_NEEDED = 1
EXIT_ERROR = 2

_EPILOG = """\
examples:
  mdtidy README.md                 print the formatted file
  mdtidy --write docs/             format files in place
  mdtidy --check README.md docs/   exit 1 if anything needs formatting
  mdtidy --diff README.md          show what would change
  mdtidy --print-config
  mdtidy --save-config .mdtidy.yaml  write the effective configuration

configuration is read from --config, else the nearest .mdtidy.yaml (or
.yml/.json, or mdtidy.*) in the current or a parent directory, else defaults.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdtidy",
        description="Normalize Markdown formatting.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="*", help="Markdown files or directories")

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("-w", "--write", action="store_true", help="write formatted content back to files")
    modes.add_argument("-c", "--check", action="store_true", help="exit 1 if any file needs formatting")
    modes.add_argument("-l", "--list", action="store_true", help="list files that need formatting")
    modes.add_argument("-d", "--diff", action="store_true", help="show a unified diff of the changes")

    parser.add_argument("--config", type=Path, help="path to a configuration file")
    parser.add_argument("--print-config", action="store_true", help="print the effective configuration as YAML")
    parser.add_argument("--save-config", type=Path, metavar="FILE", help="write the effective configuration to FILE and exit")

    output = parser.add_mutually_exclusive_group()
    output.add_argument("-v", "--verbose", action="store_true", help="verbose output")
    output.add_argument("-q", "--quiet", action="store_true", help="suppress non-error output")

    parser.add_argument("--version", action="version", version=f"mdtidy {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = resolve_config(args.config)
    except ConfigError as exc:
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if args.print_config:
        sys.stdout.write(dump_config(config))
        return EXIT_OK

    if args.save_config:
        try:
            save_config(config, args.save_config)
        except ConfigError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return EXIT_ERROR
        if not args.quiet:
            print(f"Wrote configuration to {args.save_config}", file=sys.stderr)
        return EXIT_OK

    if not args.paths:
        if not args.quiet:
            print("Error: no input files or directories specified", file=sys.stderr)
            print("Run 'mdtidy -h' for usage information.", file=sys.stderr)
        return EXIT_ERROR

    try:
        files = find_files(args.paths, config)
    except ProcessingError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if not files:
        if args.verbose:
            print("No markdown files found", file=sys.stderr)
        return EXIT_OK

    results = asyncio.run(process_files(files, config, write=args.write))
    return report(results, args, config)


def report(results: list[ProcessingResult], args: argparse.Namespace, config: FormatterConfig) -> int:
    """Print per-file output for the selected mode and compute the exit code."""
    failed = False
    changed = False

    for result in results:
        name = result.file.relative_path
        if not result.success:
            failed = True
            print(f"Error processing {name}: {result.error}", file=sys.stderr)
            continue
        changed = changed or result.changed

        if args.write:
            if args.verbose:
                state = "Formatted" if result.written else "Already formatted"
                print(f"{state}: {name}", file=sys.stderr)
        elif args.check:
            if result.changed and not args.quiet:
                print(f"would reformat {name}", file=sys.stderr)
        elif args.list:
            if result.changed:
                print(name)
        elif args.diff:
            if result.changed:
                sys.stdout.writelines(unified_diff(result.original, result.formatted, name))
        else:
            sys.stdout.write(result.formatted)

    logger.debug(
        "Run finished",
        extra={"files": len(results), "changed": changed, "failed": failed, "line_width": config.line_width},
    )
    if failed:
        return EXIT_ERROR
    if args.check and changed:
        return EXIT_CHANGES_NEEDED
    return EXIT_OK


def unified_diff(original: str, formatted: str, name: str) -> list[str]:
    """Return unified diff lines between the original and formatted text."""
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        formatted.splitlines(keepends=True),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
    )
    lines = []
    for line in diff:
        lines.append(line if line.endswith("\n") else line + "\n")
    return lines


if __name__ == "__main__":
    sys.exit(main())
