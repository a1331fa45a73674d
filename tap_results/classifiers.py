"""Line classifiers for TAP version 13 output.

Each classifier looks at a single line, independent of parse state, and
returns a small structured match or ``None``. Numbers are decoded with
signed 64-bit limits; digits that do not fit are reported as
``ParseFailure.OVERFLOW`` instead of raising.
"""

import enum
import re
from dataclasses import dataclass
from typing import cast

INT64_MAX = 2**63 - 1
INT64_MAX_DIGITS = str(INT64_MAX)

VERSION_RE = re.compile(r"^TAP version (\d+)", re.ASCII)
BAIL_OUT_RE = re.compile(r"Bail out!\s*(.*)", re.ASCII)
PLAN_RE = re.compile(r"\d+\.\.(\d+)", re.ASCII)
TEST_LINE_RE = re.compile(r"^(not )?ok\b(.*)", re.ASCII)
TEST_LINE_CONTENT_RE = re.compile(
    r"\s*(?P<number>\d*)\s*"
    r"(?P<description>(?:\\.|[^#\\])*\\?)"
    r"(?:#\s*(?P<directive_text>(?P<directive>\w*).*))?",
    re.ASCII,
)
COMMENT_RE = re.compile(r"#(.*)")
YAML_START_RE = re.compile(r"\s*---\s*", re.ASCII)
YAML_END_RE = re.compile(r"\s*\.\.\.\s*", re.ASCII)


class ParseFailure(enum.Enum):
    """Reason a numeric capture could not be decoded."""

    OVERFLOW = "overflow"


Number = int | ParseFailure


@dataclass(frozen=True, kw_only=True)
class VersionMatch:
    """A ``TAP version N`` header."""

    version: Number


@dataclass(frozen=True, kw_only=True)
class BailOutMatch:
    """A ``Bail out!`` line; ``reason`` is empty when none was given."""

    reason: str


@dataclass(frozen=True, kw_only=True)
class PlanMatch:
    """A ``1..N`` plan declaration."""

    count: Number


@dataclass(frozen=True, kw_only=True)
class TestLineMatch:
    """A decoded ``ok``/``not ok`` line.

    ``number`` is ``None`` when the line carries no number. ``directive``
    is the first word after ``#`` (possibly empty) and ``directive_text``
    everything from that word on; both are ``None`` when there is no ``#``.
    """

    __test__ = False

    not_ok: bool
    number: Number | None
    description: str
    directive: str | None
    directive_text: str | None


def parse_int64(digits: str) -> Number:
    """Decode a run of ASCII digits as a signed 64-bit integer.

    Overflow is decided on the digit string itself, so arbitrarily long
    runs never reach ``int``.
    """
    significant = digits.lstrip("0") or "0"
    if len(significant) > len(INT64_MAX_DIGITS) or (
        len(significant) == len(INT64_MAX_DIGITS) and significant > INT64_MAX_DIGITS
    ):
        return ParseFailure.OVERFLOW
    return int(significant)


def match_version(line: str) -> VersionMatch | None:
    """Match a protocol version header."""
    if (match := VERSION_RE.match(line)) is None:
        return None
    return VersionMatch(version=parse_int64(match.group(1)))


def match_bail_out(line: str) -> BailOutMatch | None:
    """Match a ``Bail out!`` line, capturing the trimmed reason."""
    if (match := BAIL_OUT_RE.fullmatch(line)) is None:
        return None
    return BailOutMatch(reason=match.group(1).strip())


def match_plan(line: str) -> PlanMatch | None:
    """Match a plan line; the leading number is ignored."""
    if (match := PLAN_RE.fullmatch(line)) is None:
        return None
    return PlanMatch(count=parse_int64(match.group(1)))


def match_test_line(line: str) -> TestLineMatch | None:
    """Match a test result line and decompose its trailing content."""
    if (match := TEST_LINE_RE.match(line)) is None:
        return None

    # The content pattern accepts the empty string, so it always matches.
    content = cast(re.Match[str], TEST_LINE_CONTENT_RE.match(match.group(2)))

    digits = content.group("number")
    return TestLineMatch(
        not_ok=match.group(1) is not None,
        number=parse_int64(digits) if digits else None,
        description=content.group("description").strip(),
        directive=content.group("directive"),
        directive_text=content.group("directive_text"),
    )


def match_comment(line: str) -> str | None:
    """Return the trimmed text after the first ``#``, if any."""
    if (match := COMMENT_RE.search(line)) is None:
        return None
    return match.group(1).strip()


def is_yaml_start(line: str) -> bool:
    """Whether the line opens an embedded YAML block."""
    return YAML_START_RE.fullmatch(line) is not None


def is_yaml_end(line: str) -> bool:
    """Whether the line closes an embedded YAML block."""
    return YAML_END_RE.fullmatch(line) is not None
