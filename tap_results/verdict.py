"""Overall pass/fail verdict for a parsed TAP run."""

from tap_results.models.result import Results


def is_passing(results: Results) -> bool:
    """Decide whether a run counts as passing.

    A run without a TAP header or with a ``Bail out!`` fails. Otherwise
    every expected test (the plan, or every test seen when there is no
    plan) must have passed, been skipped, or be marked TODO.
    """
    if not results.found_tap_data:
        return False
    if results.aborted:
        return False

    if results.expected_tests >= 0:
        target = results.expected_tests
    else:
        target = results.total_tests
    return (
        results.skipped_tests + results.todo_tests + results.passed_tests == target
    )
