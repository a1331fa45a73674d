"""Single-pass parser turning TAP version 13 lines into ``Results``."""

import enum
import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from tap_results.classifiers import (
    Number,
    ParseFailure,
    TestLineMatch,
    is_yaml_end,
    is_yaml_start,
    match_bail_out,
    match_comment,
    match_plan,
    match_test_line,
    match_version,
)
from tap_results.models.result import (
    NO_PLAN,
    NO_VERSION,
    OVERFLOWED_NUMBER,
    Outcome,
    Results,
    Test,
)

log = logging.getLogger(__name__)


class ParseState(enum.Enum):
    """States of the line-driven parser."""

    SEEKING_VERSION = "seeking_version"
    IN_TEST_STREAM = "in_test_stream"
    IN_DATA_BLOCK = "in_data_block"


@dataclass(kw_only=True)
class _StagedTest:
    """Test record still open for diagnostics and a data block."""

    number: Number | None = None
    outcome: Outcome | None = None
    description: str = ""
    directive_text: str | None = None
    diagnostics: list[str] = field(default_factory=list)
    data_block: bytearray = field(default_factory=bytearray)

    def freeze(self) -> Test:
        """Build the immutable ``Test`` for this record."""
        number = self.number
        if isinstance(number, ParseFailure):
            number = OVERFLOWED_NUMBER
        return Test(
            number=number,
            outcome=self.outcome,
            description=self.description,
            directive_text=self.directive_text,
            diagnostics=tuple(self.diagnostics),
            data_block=bytes(self.data_block),
        )


def encode_line(line: str) -> bytes:
    """Encode a data block line, restoring bytes the reader could not decode.

    Lone surrogates that do not stand for an undecodable byte are written
    as their UTF-8-style encoding rather than rejected.
    """
    try:
        return line.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return line.encode("utf-8", "surrogatepass")


def classify(match: TestLineMatch) -> Outcome:
    """Classify a test line; SKIP and TODO directives win over ok/not ok."""
    directive = (match.directive or "").lower()
    if directive == "skip":
        return "skipped"
    if directive == "todo":
        return "todo"
    return "failed" if match.not_ok else "passed"


@dataclass(kw_only=True)
class _Accumulator:
    """Parse state owned by a single ``parse`` call."""

    lines: Sequence[str]
    state: ParseState = ParseState.SEEKING_VERSION
    protocol_version: int = NO_VERSION
    expected_tests: int = NO_PLAN
    aborted: bool = False
    abort_reason: str = ""
    plan_fulfilled: bool = False
    counts: Counter[Outcome] = field(default_factory=Counter)
    tests: list[Test] = field(default_factory=list)
    preamble_diagnostics: list[str] = field(default_factory=list)
    staged: _StagedTest | None = None

    @property
    def total_tests(self) -> int:
        return sum(self.counts.values())

    def feed(self, line: str) -> None:
        """Process one input line according to the current state."""
        match self.state:
            case ParseState.SEEKING_VERSION:
                self._seek_version(line)
            case ParseState.IN_TEST_STREAM:
                self._read_test_stream(line)
            case ParseState.IN_DATA_BLOCK:
                self._read_data_block(line)

    def _seek_version(self, line: str) -> None:
        if (version := match_version(line)) is None:
            return
        if isinstance(version.version, ParseFailure):
            log.debug("Skipping version line with unusable number: %r", line)
            return
        self.protocol_version = version.version
        self.state = ParseState.IN_TEST_STREAM

    def _read_test_stream(self, line: str) -> None:
        if (bail_out := match_bail_out(line)) is not None:
            self.aborted = True
            self.abort_reason = bail_out.reason
            return

        # Every well-formed plan line replaces the previous one.
        if (plan := match_plan(line)) is not None:
            if isinstance(plan.count, ParseFailure):
                log.debug("Skipping plan line with unusable count: %r", line)
            else:
                self.expected_tests = plan.count
            return

        if (test_line := match_test_line(line)) is not None:
            self._start_test(test_line)
            return

        if is_yaml_start(line):
            if self.staged is None:
                log.debug("Dropping YAML block that precedes any test line")
            self.state = ParseState.IN_DATA_BLOCK
            return

        if comment := match_comment(line):
            if self.staged is not None:
                self.staged.diagnostics.append(comment)
            else:
                self.preamble_diagnostics.append(comment)

    def _start_test(self, test_line: TestLineMatch) -> None:
        self._flush()
        self.staged = _StagedTest()
        if self.plan_fulfilled:
            # Past the plan: keep a blank record so trailing diagnostics and
            # YAML have somewhere to go, but count nothing.
            return

        outcome = classify(test_line)
        self.staged.number = test_line.number
        self.staged.description = test_line.description
        if test_line.directive:
            self.staged.directive_text = test_line.directive_text
        self.staged.outcome = outcome
        self.counts[outcome] += 1

        if self.expected_tests >= 0 and self.total_tests == self.expected_tests:
            self.plan_fulfilled = True

    def _read_data_block(self, line: str) -> None:
        if is_yaml_end(line):
            self.state = ParseState.IN_TEST_STREAM
            return
        if self.staged is not None:
            self.staged.data_block += encode_line(line)
            self.staged.data_block += b"\n"

    def _flush(self) -> None:
        if self.staged is not None:
            self.tests.append(self.staged.freeze())
            self.staged = None

    def finish(self) -> Results:
        """Close any open test record and build the final ``Results``."""
        self._flush()
        results = Results(
            expected_tests=self.expected_tests,
            total_tests=self.total_tests,
            passed_tests=self.counts["passed"],
            failed_tests=self.counts["failed"],
            skipped_tests=self.counts["skipped"],
            todo_tests=self.counts["todo"],
            protocol_version=self.protocol_version,
            aborted=self.aborted,
            abort_reason=self.abort_reason,
            tests=tuple(self.tests),
            lines=tuple(self.lines),
            preamble_diagnostics=tuple(self.preamble_diagnostics),
        )
        log.debug(
            "Parsed %d line(s): version=%d plan=%d total=%d tests=%d aborted=%s",
            len(self.lines),
            results.protocol_version,
            results.expected_tests,
            results.total_tests,
            len(results.tests),
            results.aborted,
        )
        return results


def parse(lines: Sequence[str]) -> Results:
    """Parse TAP output into a ``Results`` aggregate.

    Args:
        lines: Input lines in order, without trailing newline characters

    Returns:
        The aggregate of the run. Malformed lines are skipped rather than
        reported; the outcome of the run is decided by ``is_passing``.

    """
    accumulator = _Accumulator(lines=lines)
    for line in lines:
        accumulator.feed(line)
    return accumulator.finish()
