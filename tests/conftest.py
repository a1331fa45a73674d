"""Shared fixtures for tap_results tests."""

from pathlib import Path

import pytest

from tap_results.reader import read_lines

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    """Directory holding TAP fixture files."""
    return DATA_DIR


@pytest.fixture
def edge_case_lines(data_dir: Path) -> list[str]:
    """Lines of the edge case TAP fixture."""
    return read_lines(data_dir / "edge_cases.tap13")
