"""CLI entry point for summarizing TAP output files."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from tap_results.config import ReportConfig
from tap_results.models.result import Results
from tap_results.parser import parse
from tap_results.reader import TapFileError, read_lines
from tap_results.report import format_output, render_report
from tap_results.verdict import is_passing

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_UNREADABLE = 2

STATUS_SYMBOLS = {
    True: "✅",
    False: "❌",
}


def log_results_summary(log: logging.Logger, path: Path, results: Results) -> None:
    """Log a one-line summary of a parsed file."""
    passing = is_passing(results)
    log.info(
        "%s %s: %s (%d/%d passed, %d failed, %d skipped, %d todo)",
        STATUS_SYMBOLS[passing],
        path,
        "pass" if passing else "fail",
        results.passed_tests,
        results.total_tests,
        results.failed_tests,
        results.skipped_tests,
        results.todo_tests,
    )
    if not results.found_tap_data:
        log.info("  No TAP version header found")
    if results.aborted:
        log.info("  Bailed out: %s", results.abort_reason or "(no reason given)")


def run(paths: Sequence[Path], config: ReportConfig) -> int:
    """Parse and report every file, returning the exit code."""
    log = logging.getLogger("tap_results")
    exit_code = EXIT_PASS
    documents: list[dict[str, Any]] = []

    for path in paths:
        log.info("Reading %s", path)
        try:
            lines = read_lines(path)
        except TapFileError as e:
            log.error("%s", e)
            documents.append({"file": str(path), "error": str(e)})
            exit_code = max(exit_code, EXIT_UNREADABLE)
            continue

        results = parse(lines)
        log_results_summary(log, path, results)
        if not is_passing(results):
            exit_code = max(exit_code, EXIT_FAIL)

        if config.output_format == "json":
            documents.append(
                {
                    "file": str(path),
                    **format_output(results, include_lines=config.include_lines),
                }
            )
        else:
            print(path)
            print(render_report(results))

    if config.output_format == "json":
        print(json.dumps({"files": documents}, indent=2))

    return exit_code


def build_config(args: argparse.Namespace) -> ReportConfig:
    """Merge the JSON configuration with explicit command line flags.

    Raises:
        ValueError: If the JSON is malformed or holds invalid settings

    """
    values = json.loads(args.config) if args.config else {}
    if not isinstance(values, dict):
        raise ValueError("configuration must be a JSON object")
    overrides = {
        "output_format": args.format,
        "include_lines": args.include_lines,
        "log_level": args.log_level,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ReportConfig(**values)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Summarize TAP version 13 test output"
    )
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Files containing TAP output",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default=None,
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--include-lines",
        action="store_true",
        default=None,
        help="Echo the input lines in JSON output",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level for messages on stderr (default: WARNING)",
    )
    parser.add_argument(
        "--config",
        default="",
        help="JSON configuration; explicit flags take precedence",
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(f"invalid configuration: {e}")

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    sys.exit(run(args.files, config))


if __name__ == "__main__":  # pragma: no cover
    main()
