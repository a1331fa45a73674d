"""Human-readable and JSON renderings of parsed TAP results."""

from typing import Any

from tap_results.models.result import Results, Test
from tap_results.verdict import is_passing

NO_REASON = "(no reason given)"


def render_report(results: Results) -> str:
    """Render the fixed-layout summary of a run.

    Labels are right-aligned to a common column; lines that carry no
    information for this run are left out.
    """
    verdict = "PASS" if is_passing(results) else "FAIL"
    report = [f" Overall result: {verdict}\n"]

    total = results.total_tests
    expected = results.expected_tests
    if total == 0 or results.passed_tests != total:
        report.append(f"Total tests run: {total}\n")
    if expected > 0 and expected != total:
        report.append(f" Expected tests: {expected}\n")
    if expected > 0 and total < expected:
        report.append(f"  Missing tests: {expected - total}\n")
    if results.passed_tests > 0:
        report.append(f"   Passed tests: {results.passed_tests}\n")
    if results.failed_tests > 0:
        report.append(f"   Failed tests: {results.failed_tests}\n")
    if results.skipped_tests > 0:
        report.append(f"  Skipped tests: {results.skipped_tests}\n")
    if results.todo_tests > 0:
        report.append(f"     TODO tests: {results.todo_tests}\n")
    if results.aborted:
        report.append(f"     Bailed out: {results.abort_reason or NO_REASON}\n")

    return "".join(report)


def format_test(test: Test) -> dict[str, Any]:
    """Format a single test record for JSON output."""
    return {
        "number": test.number,
        "outcome": test.outcome,
        "description": test.description,
        "directive": test.directive_text,
        "diagnostics": list(test.diagnostics),
        "yaml": test.data_block.decode("utf-8", "replace") or None,
    }


def format_output(results: Results, *, include_lines: bool = False) -> dict[str, Any]:
    """Format results for JSON output."""
    output: dict[str, Any] = {
        "passing": is_passing(results),
        "version": results.protocol_version,
        "expected": results.expected_tests,
        "total": results.total_tests,
        "passed": results.passed_tests,
        "failed": results.failed_tests,
        "skipped": results.skipped_tests,
        "todo": results.todo_tests,
        "bailed_out": results.aborted,
        "bail_out_reason": results.abort_reason if results.aborted else None,
        "explanation": list(results.preamble_diagnostics),
        "tests": [format_test(test) for test in results.tests],
    }
    if include_lines:
        output["lines"] = list(results.lines)
    return output
