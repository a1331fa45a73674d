"""Models for parsed TAP test runs."""

from collections.abc import Sequence
from typing import Literal, Self

from pydantic import Field, model_validator

from tap_results.models.base import Model

Outcome = Literal["passed", "failed", "skipped", "todo"]

NO_PLAN = -1
NO_VERSION = -1
OVERFLOWED_NUMBER = -1


class Test(Model):
    """A single reported test outcome.

    ``number`` is ``None`` when the test line carried no number and
    ``OVERFLOWED_NUMBER`` when it carried digits that do not fit a signed
    64-bit integer. ``outcome`` is ``None`` only for the blank record staged
    for test lines that appear after the plan has been fulfilled.
    """

    __test__ = False

    number: int | None = Field(default=None, description="Test number, if given")
    outcome: Outcome | None = Field(default=None, description="Classification")
    description: str = Field(default="", description="Trimmed test description")
    directive_text: str | None = Field(
        default=None, description="Raw text following the directive marker"
    )
    diagnostics: Sequence[str] = Field(
        default_factory=tuple, description="Comment lines following the test"
    )
    data_block: bytes = Field(
        default=b"", description="Verbatim YAML block attached to the test"
    )

    @property
    def passed(self) -> bool:
        """Whether the test passed."""
        return self.outcome == "passed"

    @property
    def failed(self) -> bool:
        """Whether the test failed."""
        return self.outcome == "failed"

    @property
    def skipped(self) -> bool:
        """Whether the test carried a SKIP directive."""
        return self.outcome == "skipped"

    @property
    def todo(self) -> bool:
        """Whether the test carried a TODO directive."""
        return self.outcome == "todo"


class Results(Model):
    """Aggregate of a whole TAP run.

    The input lines are echoed in ``lines``. Comments seen before the first
    test line are kept in ``preamble_diagnostics``; ``tests`` holds one
    record per test line in input order.
    """

    expected_tests: int = Field(default=NO_PLAN, description="Declared plan size")
    total_tests: int = Field(default=0, ge=0)
    passed_tests: int = Field(default=0, ge=0)
    failed_tests: int = Field(default=0, ge=0)
    skipped_tests: int = Field(default=0, ge=0)
    todo_tests: int = Field(default=0, ge=0)
    protocol_version: int = Field(default=NO_VERSION, description="TAP version")
    aborted: bool = Field(default=False, description="Whether a Bail out! was seen")
    abort_reason: str = Field(default="", description="Reason given after Bail out!")
    tests: Sequence[Test] = Field(default_factory=tuple)
    lines: Sequence[str] = Field(default_factory=tuple)
    preamble_diagnostics: Sequence[str] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def check_counters(self) -> Self:
        """Ensure every counted test has exactly one outcome."""
        counted = (
            self.passed_tests + self.failed_tests + self.skipped_tests + self.todo_tests
        )
        if counted != self.total_tests:
            raise ValueError(
                f"total_tests ({self.total_tests}) does not match the sum of "
                f"per-outcome counters ({counted})"
            )
        return self

    @property
    def found_tap_data(self) -> bool:
        """Whether a TAP version header was recognized in the input."""
        return self.protocol_version >= 0
