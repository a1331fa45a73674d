"""Reading TAP output files into lines."""

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class TapFileError(Exception):
    """Raised when a TAP file cannot be read."""


def split_lines(text: str) -> list[str]:
    """Split text on newlines, dropping one trailing carriage return per line.

    A final newline does not produce an empty trailing line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def read_lines(path: Path) -> list[str]:
    """Read a TAP file into lines.

    Undecodable bytes are kept as surrogate escapes so YAML blocks can be
    stored byte for byte.

    Raises:
        TapFileError: If the file does not exist or cannot be read

    """
    try:
        text = path.read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise TapFileError(f"Could not open file {path}: {e.strerror or e}") from e

    lines = split_lines(text)
    log.debug("Read %d line(s) from %s", len(lines), path)
    return lines
