# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for lifter.

Commands:

    run: Check every tracked section and update outdated artifacts
    validate: Validate store syntax and configuration (no network)

Example:
    Update everything in a store:
        ```bash
        $ lifter run lifter.ini
        ```

    Update two sections with extra output:
        ```bash
        $ lifter run lifter.ini --section rg --section fd --verbose
        ```

    Validate a store:
        ```bash
        $ lifter validate lifter.ini
        ```

Exit Codes:

- 0: Success
- 1: Error (store could not be loaded, a section failed, or validation
  failed)

Note:
    Debug mode implies verbose mode and shows HTTP and extraction detail.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
from pathlib import Path
import sys

from lifter.core import DEFAULT_WORKERS, run_all
from lifter.exceptions import LifterError
from lifter.logging import get_logger, set_global_logger
from lifter.validation import validate_store


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def cmd_run(args: argparse.Namespace) -> int:
    """Handler for 'lifter run' command.

    Args:
        args: Parsed command-line arguments containing the store path,
            worker count, section filter, output directory and flags.

    Returns:
        Exit code (0 if every section finished without a fault, 1 otherwise).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    config_path = Path(args.config).resolve()
    output_dir = Path(args.output_dir).resolve() if args.output_dir else None

    try:
        results = run_all(
            config_path,
            workers=args.workers,
            sections=args.section or None,
            output_dir=output_dir,
            logger=logger,
        )
    except LifterError as err:
        print(f"Error: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    failed = [r for r in results if not r.ok]

    print("=" * 70)
    print("RUN RESULTS")
    print("=" * 70)
    for result in sorted(results, key=lambda r: r.section):
        line = f"{result.section:<24} {result.status:<12}"
        if result.version:
            line += f" {result.version}"
        if result.detail:
            line += f" ({result.detail})"
        print(line)
    print("=" * 70)
    print()

    if failed:
        print(f"[FAILED] {len(failed)} of {len(results)} section(s) failed.")
        return 1

    updated = sum(1 for r in results if r.status == "updated")
    print(f"[SUCCESS] {len(results)} section(s) checked, {updated} updated.")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'lifter validate' command.

    Args:
        args: Parsed command-line arguments containing the store path and
            verbose flag.

    Returns:
        Exit code (0 for a valid store, 1 for invalid).

    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    config_path = Path(args.config).resolve()

    print(f"Validating store: {config_path}")
    print()

    result = validate_store(config_path, verbose=args.verbose)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Store:         {result.config_path}")
    print(f"Status:        {result.status.upper()}")
    print(f"Section Count: {result.section_count}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Store is valid!")
        return 0

    print()
    print(f"[FAILED] Store validation failed with {len(result.errors)} error(s).")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifter",
        description="lifter - keep third-party binaries up to date from their release pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"lifter {version('lifter')}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'run' command
    parser_run = subparsers.add_parser(
        "run",
        help="Check tracked sections and download newer artifacts",
        description="Check every tracked section for a newer release and update the artifact and the stored version.",
    )
    parser_run.add_argument(
        "config",
        help="Path to the ini or YAML store",
    )
    parser_run.add_argument(
        "--workers",
        type=_positive_int,
        default=DEFAULT_WORKERS,
        help=f"Number of sections checked at once (default: {DEFAULT_WORKERS})",
    )
    parser_run.add_argument(
        "--section",
        action="append",
        metavar="NAME",
        help="Only check this section (repeatable)",
    )
    parser_run.add_argument(
        "--output-dir",
        default=None,
        help="Directory for relative desired filenames (default: current directory)",
    )
    parser_run.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_run.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_run.set_defaults(func=cmd_run)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate store syntax and configuration (no downloads)",
        description="Check the store for syntax errors and configuration issues without making network calls.",
    )
    parser_validate.add_argument(
        "config",
        help="Path to the ini or YAML store",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the lifter CLI.

    This function is registered as the 'lifter' console script in pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
